"""
Printing subsystem for Receipt Printer.

This package groups printing-related functionality:

- raster: uploaded image bytes to a dithered 1-bit raster
- device: ESC/POS printer connection (file, USB, serial, network)
- jobs: text and image receipt jobs
- job_queue: serialized FIFO execution of print jobs

For convenience, common names are re-exported for easy import.
"""

from .device import *
from .job_queue import *
from .jobs import *
from .raster import *
