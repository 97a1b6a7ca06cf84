"""pytsdoc, a parser for TSDoc documentation comments.

The main entry point is L{pytsdoc.parser.TSDocParser}::

    from pytsdoc.parser import TSDocParser

    context = TSDocParser().parse_string('/** Hello world */')
    for message in context.log.messages:
        print(message)

"""

import importlib.metadata as importlib_metadata


try:
    __version__ = importlib_metadata.version('pytsdoc')
except importlib_metadata.PackageNotFoundError:
    # Running from a source checkout.
    __version__ = '0.0.0'

__all__ = ["__version__"]
