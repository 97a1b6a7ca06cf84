import sys

from pytsdoc.driver import main

sys.exit(main())
