"""
Pytest configuration for local imports and in-memory image fixtures.
"""

# Standard Library
import io
import os
import sys

# PIP3 modules
import PIL.Image
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()
import photo_pdf_converter.collection


#============================================
def encode_test_image(
	width: int,
	height: int,
	image_format: str = "JPEG",
	color: tuple = (200, 40, 40),
) -> bytes:
	"""
	Encode a solid color test image.

	Args:
		width: Pixel width.
		height: Pixel height.
		image_format: Pillow format name.
		color: Fill color.

	Returns:
		Encoded bytes.
	"""
	mode = "RGBA" if image_format == "PNG" and len(color) == 4 else "RGB"
	image = PIL.Image.new(mode, (width, height), color)
	buffer = io.BytesIO()
	image.save(buffer, format=image_format)
	return buffer.getvalue()


#============================================
@pytest.fixture
def make_raw_file():
	"""
	Factory for RawFile entries with generated image content.
	"""
	def factory(
		name: str = "photo.jpg",
		width: int = 800,
		height: int = 600,
		content_type: str = "image/jpeg",
		color: tuple = (200, 40, 40),
	) -> photo_pdf_converter.collection.RawFile:
		image_format = "PNG" if "png" in content_type.lower() else "JPEG"
		data = encode_test_image(width, height, image_format, color)
		return photo_pdf_converter.collection.RawFile(
			name=name,
			content_type=content_type,
			data=data,
		)
	return factory
