"""
Rotation rendering and PDF document assembly.
"""

# Standard Library
import dataclasses
import io
import json
import pathlib

# PIP3 modules
import PIL.Image
import pypdf
import pypdf.errors
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import photo_pdf_converter as ppc
import photo_pdf_converter.collection
import photo_pdf_converter.config
import photo_pdf_converter.errors
import photo_pdf_converter.layout


SourceImage = ppc.collection.SourceImage
PageSpec = ppc.config.PageSpec
PagePlacement = ppc.config.PagePlacement
BuildResult = ppc.config.BuildResult
compute_page_dimensions = ppc.layout.compute_page_dimensions
compute_placement = ppc.layout.compute_placement

BuildError = ppc.errors.BuildError
RotationError = ppc.errors.RotationError
EmptyCollectionError = ppc.errors.EmptyCollectionError
InvalidLayoutError = ppc.errors.InvalidLayoutError

PIL_FORMATS = ppc.config.PIL_FORMATS
JPEG_QUALITY = ppc.config.JPEG_QUALITY
PROGRESS_BAR_WIDTH = ppc.config.PROGRESS_BAR_WIDTH

# Clockwise quarter turns mapped to Pillow transposes (Pillow turns counter-clockwise).
ROTATION_TRANSPOSES = {
	90: PIL.Image.Transpose.ROTATE_270,
	180: PIL.Image.Transpose.ROTATE_180,
	270: PIL.Image.Transpose.ROTATE_90,
}


@dataclasses.dataclass(frozen=True)
class PageHandle:
	index: int
	width: float
	height: float


@dataclasses.dataclass(frozen=True)
class ImageHandle:
	reader: reportlab.lib.utils.ImageReader
	image_format: str
	width: int
	height: int


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def rotate_image(image: PIL.Image.Image, degrees: int) -> PIL.Image.Image:
	"""
	Rotate an image clockwise by a multiple of 90 degrees.

	The input image is left untouched. Quarter turns swap width and height.

	Args:
		image: Source image.
		degrees: One of 0, 90, 180, 270.

	Returns:
		New rotated image.
	"""
	normalized = degrees % 360
	if normalized == 0:
		return image.copy()
	transpose = ROTATION_TRANSPOSES.get(normalized)
	if transpose is None:
		raise RotationError(f"Unsupported rotation: {degrees} degrees")
	return image.transpose(transpose)


#============================================
def encode_image(image: PIL.Image.Image, image_format: str) -> bytes:
	"""
	Encode an image in the given format.

	Args:
		image: Image to encode.
		image_format: "jpeg" or "png".

	Returns:
		Encoded bytes.
	"""
	buffer = io.BytesIO()
	if image_format == "jpeg":
		if image.mode not in ("RGB", "L", "CMYK"):
			image = image.convert("RGB")
		image.save(buffer, format=PIL_FORMATS[image_format], quality=JPEG_QUALITY)
	else:
		image.save(buffer, format=PIL_FORMATS[image_format])
	return buffer.getvalue()


#============================================
def render_image_for_export(source_image: SourceImage) -> bytes:
	"""
	Produce the encoded raster for a page, with rotation applied.

	Unrotated images pass through with their original bytes. Rotated
	images are decoded again from the original bytes and re-encoded in
	their original format.

	Args:
		source_image: Image from the collection.

	Returns:
		Encoded image bytes.
	"""
	if source_image.rotation_degrees % 360 == 0:
		return source_image.data
	try:
		with PIL.Image.open(io.BytesIO(source_image.data)) as image:
			rotated = rotate_image(image, source_image.rotation_degrees)
		return encode_image(rotated, source_image.image_format)
	except RotationError:
		raise
	except (OSError, ValueError, KeyError) as error:
		raise RotationError(f"Failed to rotate {source_image.name}") from error


#============================================
class PdfDocument:
	"""
	In-memory PDF built on a ReportLab canvas, one image per page.
	"""

	def __init__(self):
		self._buffer = io.BytesIO()
		self._canvas = reportlab.pdfgen.canvas.Canvas(self._buffer)
		self._current_page: PageHandle | None = None
		self._pdf_bytes: bytes | None = None
		self.page_count = 0

	def add_page(self, width: float, height: float) -> PageHandle:
		if self._current_page is not None:
			self._canvas.showPage()
		self._canvas.setPageSize((width, height))
		page = PageHandle(index=self.page_count, width=width, height=height)
		self.page_count += 1
		self._current_page = page
		return page

	def embed_raster(self, data: bytes, image_format: str) -> ImageHandle:
		reader = reportlab.lib.utils.ImageReader(io.BytesIO(data))
		width, height = reader.getSize()
		return ImageHandle(reader=reader, image_format=image_format, width=width, height=height)

	def draw_image(
		self,
		page: PageHandle,
		image: ImageHandle,
		x: float,
		y: float,
		width: float,
		height: float,
	) -> None:
		if page != self._current_page:
			raise BuildError(f"Page {page.index} is not the current page")
		# PNG alpha becomes a soft mask; JPEG has none.
		mask = "auto" if image.image_format == "png" else None
		self._canvas.drawImage(
			image.reader,
			x,
			y,
			width=width,
			height=height,
			mask=mask,
			preserveAspectRatio=False,
			anchor="sw",
		)

	def serialize(self) -> bytes:
		if self._pdf_bytes is None:
			if self._current_page is not None:
				self._canvas.showPage()
				self._current_page = None
			self._canvas.save()
			self._pdf_bytes = self._buffer.getvalue()
		return self._pdf_bytes


#============================================
def count_pdf_pages(pdf_bytes: bytes) -> int:
	"""
	Count pages in serialized PDF bytes.

	Args:
		pdf_bytes: PDF data.

	Returns:
		Page count.
	"""
	try:
		reader = pypdf.PdfReader(io.BytesIO(pdf_bytes))
		return len(reader.pages)
	except pypdf.errors.PyPdfError as error:
		raise BuildError("Generated PDF could not be read back") from error


#============================================
def build_document(
	images: list[SourceImage] | tuple[SourceImage, ...],
	page_spec: PageSpec,
	document_factory=PdfDocument,
	verbose: bool = False,
) -> BuildResult:
	"""
	Build a PDF with one page per image, in the given order.

	Args:
		images: Snapshot of the collection.
		page_spec: Page size, orientation and margin.
		document_factory: Callable returning a new document collaborator.
		verbose: Print a progress bar.

	Returns:
		BuildResult with placements and PDF bytes.
	"""
	images = list(images)
	if not images:
		raise EmptyCollectionError()
	page_width, page_height = compute_page_dimensions(page_spec.page_size, page_spec.orientation)
	total = len(images)
	placements: list[PagePlacement] = []
	try:
		document = document_factory()
		for index, source_image in enumerate(images, start=1):
			if verbose:
				print_progress("Adding pages", index - 1, total)
			data = render_image_for_export(source_image)
			image_handle = document.embed_raster(data, source_image.image_format)
			page = document.add_page(page_width, page_height)
			placement = compute_placement(
				image_handle.width,
				image_handle.height,
				page.width,
				page.height,
				page_spec.margin_points,
			)
			document.draw_image(
				page,
				image_handle,
				placement.x,
				placement.y,
				placement.width,
				placement.height,
			)
			placements.append(
				PagePlacement(
					image_id=source_image.image_id,
					name=source_image.name,
					rotation_degrees=source_image.rotation_degrees,
					pixel_width=image_handle.width,
					pixel_height=image_handle.height,
					placement=placement,
				)
			)
		if verbose:
			print_progress("Adding pages", total, total)
			print()
		pdf_bytes = document.serialize()
	except (BuildError, InvalidLayoutError):
		raise
	except Exception as error:
		raise BuildError(f"Conversion failed: {error}") from error

	pages = count_pdf_pages(pdf_bytes)
	if pages != total:
		raise BuildError(f"Expected {total} pages, document has {pages}")
	return BuildResult(
		pages=pages,
		page_width=page_width,
		page_height=page_height,
		placements=placements,
		pdf_bytes=pdf_bytes,
	)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	inputs: list[pathlib.Path],
	failures: list[tuple[str, str]],
	page_spec: PageSpec,
	result: BuildResult,
	output_path: pathlib.Path | None,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		inputs: Input image files.
		failures: Skipped files as (name, message).
		page_spec: Page settings used for the build.
		result: Build result.
		output_path: Written PDF path, None for an in-memory preview.
	"""
	data = {
		"inputs": [str(path) for path in inputs],
		"skipped": [{"name": name, "message": message} for name, message in failures],
		"output": str(output_path) if output_path is not None else None,
		"pages": result.pages,
		"layout": {
			"page_size": page_spec.page_size,
			"orientation": page_spec.orientation,
			"margin_points": page_spec.margin_points,
			"page_width": result.page_width,
			"page_height": result.page_height,
		},
		"placements": [
			{
				"page": index,
				"image_id": entry.image_id,
				"name": entry.name,
				"rotation": entry.rotation_degrees,
				"pixel_width": entry.pixel_width,
				"pixel_height": entry.pixel_height,
				"x": round(entry.placement.x, 3),
				"y": round(entry.placement.y, 3),
				"width": round(entry.placement.width, 3),
				"height": round(entry.placement.height, 3),
				"scale": round(entry.placement.scale, 6),
			}
			for index, entry in enumerate(result.placements, start=1)
		],
	}
	try:
		with manifest_path.open("w", encoding="utf-8") as handle:
			json.dump(data, handle, indent=2, sort_keys=True)
	except OSError as error:
		raise BuildError(f"Could not write {manifest_path}: {error.strerror or error}") from error
