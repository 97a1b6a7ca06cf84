"""
Experimental features whose API may still change.

L{pytsdoc.beta.declref} implements the newer declaration reference
notation: C{my-package!Namespace.Class#member:function(1)}.
"""
