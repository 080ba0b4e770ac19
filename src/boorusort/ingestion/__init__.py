"""Discovery and hashing of local image files."""

from .detectors import HashComputer, TypeDetector
from .discovery import DirectoryScanner
from .models import FileDescriptor, PendingFile

__all__ = ["DirectoryScanner", "TypeDetector", "HashComputer", "PendingFile", "FileDescriptor"]
