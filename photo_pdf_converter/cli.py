"""
CLI entry points for photo to PDF conversion.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import photo_pdf_converter as ppc
import photo_pdf_converter.collection
import photo_pdf_converter.config
import photo_pdf_converter.errors
import photo_pdf_converter.render
import photo_pdf_converter.session


ConverterSession = ppc.session.ConverterSession
PhotoPdfError = ppc.errors.PhotoPdfError

PAGE_SIZES = ppc.config.PAGE_SIZES
MARGINS = ppc.config.MARGINS
DEFAULT_PAGE_SIZE = ppc.config.DEFAULT_PAGE_SIZE
DEFAULT_MARGIN = ppc.config.DEFAULT_MARGIN
DEFAULT_OUTPUT_NAME = ppc.config.DEFAULT_OUTPUT_NAME


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Optional argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Combine JPEG and PNG photos into one PDF, one photo per page.")
	parser.add_argument("inputs", nargs="+", help="Image files or directories.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output-name", dest="output_name", default=DEFAULT_OUTPUT_NAME, help="Output PDF base name.")
	output_group.add_argument("-d", "--output-dir", dest="output_dir", default=".", help="Output directory.")
	output_group.add_argument("-j", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument(
		"-n",
		"--preview",
		dest="preview",
		action="store_true",
		help="Build the PDF in memory and print a page summary without writing it.",
	)

	page_group = parser.add_argument_group("Page")
	page_group.add_argument("-s", "--page-size", dest="page_size", choices=sorted(PAGE_SIZES), type=str.upper, help="Page size.")
	page_group.add_argument("-l", "--landscape", dest="orientation", action="store_const", const="landscape", help="Landscape pages.")
	page_group.add_argument("-p", "--portrait", dest="orientation", action="store_const", const="portrait", help="Portrait pages.")
	page_group.add_argument("-m", "--margin", dest="margin", choices=list(MARGINS), type=str.lower, help="Page margin.")

	order_group = parser.add_argument_group("Order and rotation (1-based positions)")
	order_group.add_argument("-r", "--rotate", dest="rotate", type=int, action="append", default=[], help="Rotate image 90 degrees clockwise; repeat to turn further.")
	order_group.add_argument("-u", "--move-up", dest="move_up", type=int, action="append", default=[], help="Move image one position earlier.")
	order_group.add_argument("-w", "--move-down", dest="move_down", type=int, action="append", default=[], help="Move image one position later.")
	order_group.add_argument("-x", "--remove", dest="remove", type=int, action="append", default=[], help="Remove image at position.")

	parser.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Print progress.")

	parser.set_defaults(
		page_size=DEFAULT_PAGE_SIZE,
		orientation="portrait",
		margin=DEFAULT_MARGIN,
		preview=False,
		verbose=False,
	)

	args = parser.parse_args(argv)
	return args


#============================================
def apply_edits(session: ConverterSession, args: argparse.Namespace) -> None:
	"""
	Apply rotate, move and remove requests to the collection.

	Rotations are applied first, then moves, then removals. Each step uses
	positions as they are at that point.

	Args:
		session: Converter session.
		args: Parsed argparse namespace.
	"""
	collection = session.collection
	for position in args.rotate:
		degrees = collection.rotate(position - 1)
		print(f"Rotated image {position} to {degrees} degrees")
	for position in args.move_up:
		collection.move(position - 1, -1)
	for position in args.move_down:
		collection.move(position - 1, 1)
	# Highest first so earlier removals do not shift later ones.
	for position in sorted(set(args.remove), reverse=True):
		removed = collection.remove(position - 1)
		print(f"Removed image {position}: {removed.name}")


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Run the full pipeline from image files to PDF.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit code.
	"""
	print("Photo to PDF pipeline")
	print(f"Page: {args.page_size} {args.orientation}, margin {args.margin}")

	session = ConverterSession(verbose=args.verbose)
	session.configure(args.page_size, args.orientation, args.margin)

	paths = ppc.collection.gather_image_paths(args.inputs)
	print(f"Image files found: {len(paths)}")

	start_time = time.perf_counter()
	raw_files = [ppc.collection.load_raw_file(path) for path in paths]
	report = session.collection.add_files(raw_files, verbose=True)
	load_end = time.perf_counter()
	print(f"Images added: {len(report.added)}")
	if report.failures:
		print(f"Files skipped: {len(report.failures)}")

	try:
		apply_edits(session, args)
		if args.preview:
			artifact = session.preview(args.output_name)
			output_path = None
		else:
			output_path = session.export(args.output_name, pathlib.Path(args.output_dir))
			artifact = session.artifact
	except PhotoPdfError as error:
		print(f"Error: {error}")
		return 1
	build_end = time.perf_counter()

	result = artifact.result
	print(f"Pages written: {result.pages}")
	if output_path is None:
		print(f"Preview size: {len(result.pdf_bytes)} bytes")
		for index, entry in enumerate(result.placements, start=1):
			placement = entry.placement
			print(
				f"  page {index}: {entry.name} rot={entry.rotation_degrees} "
				f"at ({placement.x:.1f}, {placement.y:.1f}) "
				f"size {placement.width:.1f}x{placement.height:.1f}"
			)
	else:
		print(f"Output PDF: {output_path}")

	manifest_path = args.manifest_path
	if manifest_path is None and output_path is not None:
		manifest_path = f"{output_path}.json"
	if manifest_path is not None:
		try:
			ppc.render.write_manifest(
				pathlib.Path(manifest_path),
				paths,
				report.failures,
				session.page_spec,
				result,
				output_path,
			)
		except PhotoPdfError as error:
			print(f"Error: {error}")
			return 1
		print(f"Manifest written: {manifest_path}")

	if args.preview:
		session.dismiss_preview()

	print(
		"Timing: load={:.2f}s build={:.2f}s total={:.2f}s".format(
			load_end - start_time,
			build_end - load_end,
			build_end - start_time,
		)
	)
	return 0


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	sys.exit(run_pipeline(args))
