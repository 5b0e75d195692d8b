"""
Error types for ingestion, layout and document builds.
"""


class PhotoPdfError(Exception):
	"""Base error for the converter."""
	pass


class UnsupportedFormatError(PhotoPdfError):
	"""File content type is not an accepted image type."""

	def __init__(self, name: str, content_type: str):
		self.name = name
		self.content_type = content_type
		super().__init__(f"Skipped {name} - unsupported format ({content_type}).")


class DecodeError(PhotoPdfError):
	"""File could not be decoded as an image."""

	def __init__(self, name: str):
		self.name = name
		super().__init__(f"Could not load {name}. Please try again.")


class InvalidPositionError(PhotoPdfError, IndexError):
	"""Collection position out of range."""
	pass


class ImageNotFoundError(PhotoPdfError, KeyError):
	"""No image with the requested id."""
	pass


class InvalidLayoutError(PhotoPdfError):
	"""Margins or image size leave no printable area."""
	pass


class EmptyCollectionError(PhotoPdfError):
	"""Export requested with no images."""

	def __init__(self):
		super().__init__("Add some photos before converting.")


class BuildError(PhotoPdfError):
	"""Error during document assembly or serialization."""
	pass


class RotationError(BuildError):
	"""Raster rotation or re-encoding failed."""
	pass


class BuildInProgressError(PhotoPdfError):
	"""A build is already running for this session."""
	pass
