"""
Offline export of mosaic renderings to video files, GIFs and image
sequences.
"""

from .assembler import MosaicAssembler

__all__ = [
    'MosaicAssembler',
]
