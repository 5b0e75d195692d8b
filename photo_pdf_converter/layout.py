"""
Page size lookup and contain-fit placement math.
"""

# local repo modules
import photo_pdf_converter as ppc
import photo_pdf_converter.config
import photo_pdf_converter.errors


PAGE_SIZES = ppc.config.PAGE_SIZES
Placement = ppc.config.Placement
InvalidLayoutError = ppc.errors.InvalidLayoutError


#============================================
def compute_page_dimensions(page_size: str, orientation: str) -> tuple[float, float]:
	"""
	Look up page dimensions in points.

	Args:
		page_size: Page size name (A4 or LETTER).
		orientation: portrait or landscape.

	Returns:
		Tuple of (width, height). Landscape swaps the portrait values.
	"""
	width, height = PAGE_SIZES[page_size.upper()]
	if orientation.lower() == "landscape":
		return (height, width)
	return (width, height)


#============================================
def compute_placement(
	image_width: float,
	image_height: float,
	page_width: float,
	page_height: float,
	margin: float,
) -> Placement:
	"""
	Scale an image to fit inside the page margins and center it on the page.

	The scale is the largest uniform factor that keeps the whole image
	inside the printable area. Centering uses the full page, so equal
	margins on both sides only bound the scale.

	Args:
		image_width: Image width in pixels.
		image_height: Image height in pixels.
		page_width: Page width in points.
		page_height: Page height in points.
		margin: Margin on every side in points.

	Returns:
		Placement with the lower-left corner and drawn size in points.
	"""
	if image_width <= 0 or image_height <= 0:
		raise InvalidLayoutError(f"Invalid image size {image_width}x{image_height}")
	available_width = page_width - 2.0 * margin
	available_height = page_height - 2.0 * margin
	if available_width <= 0.0 or available_height <= 0.0:
		raise InvalidLayoutError(
			f"Margin {margin} leaves no printable area on a {page_width}x{page_height} page"
		)
	scale = min(available_width / image_width, available_height / image_height)
	scaled_width = image_width * scale
	scaled_height = image_height * scale
	x = (page_width - scaled_width) / 2.0
	y = (page_height - scaled_height) / 2.0
	return Placement(x=x, y=y, width=scaled_width, height=scaled_height, scale=scale)
