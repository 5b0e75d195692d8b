"""
Shared configuration and constants.
"""

import dataclasses


PAGE_SIZES = {
	"A4": (595.28, 841.89),
	"LETTER": (612.0, 792.0),
}
ORIENTATIONS = ("portrait", "landscape")
MARGINS = {
	"none": 0.0,
	"small": 20.0,
	"medium": 40.0,
}

ALLOWED_CONTENT_TYPES = {
	"image/jpeg": "jpeg",
	"image/jpg": "jpeg",
	"image/png": "png",
}
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")
PIL_FORMATS = {
	"jpeg": "JPEG",
	"png": "PNG",
}

DEFAULT_PAGE_SIZE = "A4"
DEFAULT_ORIENTATION = "portrait"
DEFAULT_MARGIN = "none"
DEFAULT_OUTPUT_NAME = "converted-photos"
DEFAULT_IMAGE_NAME = "photo"
OUTPUT_EXTENSION = ".pdf"
PATH_SEPARATORS = ("/", "\\")
JPEG_QUALITY = 95
ROTATION_STEP = 90
PROGRESS_BAR_WIDTH = 20


@dataclasses.dataclass(frozen=True)
class PageSpec:
	page_size: str
	orientation: str
	margin_points: float


@dataclasses.dataclass(frozen=True)
class Placement:
	x: float
	y: float
	width: float
	height: float
	scale: float


@dataclasses.dataclass
class PagePlacement:
	image_id: str
	name: str
	rotation_degrees: int
	pixel_width: int
	pixel_height: int
	placement: Placement


@dataclasses.dataclass
class BuildResult:
	pages: int
	page_width: float
	page_height: float
	placements: list[PagePlacement]
	pdf_bytes: bytes


#============================================
def build_page_spec(page_size: str, orientation: str, margin: str) -> PageSpec:
	"""
	Build a validated page spec from user-facing names.

	Args:
		page_size: Page size name (A4 or LETTER).
		orientation: portrait or landscape.
		margin: Margin preset name (none, small, medium).

	Returns:
		PageSpec.
	"""
	size_key = page_size.strip().upper()
	if size_key not in PAGE_SIZES:
		raise ValueError(f"Unknown page size: {page_size}")
	orientation_key = orientation.strip().lower()
	if orientation_key not in ORIENTATIONS:
		raise ValueError(f"Unknown orientation: {orientation}")
	margin_key = margin.strip().lower()
	if margin_key not in MARGINS:
		raise ValueError(f"Unknown margin: {margin}")
	return PageSpec(
		page_size=size_key,
		orientation=orientation_key,
		margin_points=MARGINS[margin_key],
	)


#============================================
def resolve_output_filename(base_name: str | None) -> str:
	"""
	Build the output PDF filename from a user-supplied base name.

	Path separators become underscores so the name stays inside the
	output directory.

	Args:
		base_name: Free text base name, may be blank.

	Returns:
		Filename with the PDF extension.
	"""
	stem = (base_name or "").strip()
	for separator in PATH_SEPARATORS:
		stem = stem.replace(separator, "_")
	if not stem:
		stem = DEFAULT_OUTPUT_NAME
	return f"{stem}{OUTPUT_EXTENSION}"
