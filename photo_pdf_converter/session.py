"""
Editing session state: collection, page settings and the output slot.
"""

# Standard Library
import dataclasses
import pathlib
import threading

# local repo modules
import photo_pdf_converter as ppc
import photo_pdf_converter.collection
import photo_pdf_converter.config
import photo_pdf_converter.errors
import photo_pdf_converter.render


ImageCollection = ppc.collection.ImageCollection
PageSpec = ppc.config.PageSpec
BuildResult = ppc.config.BuildResult
build_page_spec = ppc.config.build_page_spec
resolve_output_filename = ppc.config.resolve_output_filename
build_document = ppc.render.build_document
PdfDocument = ppc.render.PdfDocument
BuildError = ppc.errors.BuildError
BuildInProgressError = ppc.errors.BuildInProgressError

DEFAULT_PAGE_SIZE = ppc.config.DEFAULT_PAGE_SIZE
DEFAULT_ORIENTATION = ppc.config.DEFAULT_ORIENTATION
DEFAULT_MARGIN = ppc.config.DEFAULT_MARGIN


@dataclasses.dataclass
class OutputArtifact:
	kind: str
	filename: str
	result: BuildResult

	@property
	def pdf_bytes(self) -> bytes:
		return self.result.pdf_bytes


#============================================
def write_pdf(output_dir: pathlib.Path, filename: str, pdf_bytes: bytes) -> pathlib.Path:
	"""
	Write PDF bytes into a directory, creating it when missing.

	Args:
		output_dir: Target directory.
		filename: PDF filename without directory parts.
		pdf_bytes: Document data.

	Returns:
		Path of the written file.
	"""
	output_path = output_dir / filename
	try:
		output_dir.mkdir(parents=True, exist_ok=True)
		output_path.write_bytes(pdf_bytes)
	except OSError as error:
		raise BuildError(f"Could not write {output_path}: {error.strerror or error}") from error
	return output_path


#============================================
class ConverterSession:
	"""
	One editing session.

	Owns the image collection and at most one built document. Builds are
	exclusive: a build requested while another runs is rejected. A failed
	build or write leaves the collection and the previous document in place.
	"""

	def __init__(self, document_factory=PdfDocument, verbose: bool = False):
		self.collection = ImageCollection()
		self.page_spec: PageSpec = build_page_spec(
			DEFAULT_PAGE_SIZE,
			DEFAULT_ORIENTATION,
			DEFAULT_MARGIN,
		)
		self.artifact: OutputArtifact | None = None
		self.verbose = verbose
		self._document_factory = document_factory
		self._build_lock = threading.Lock()

	@property
	def is_building(self) -> bool:
		return self._build_lock.locked()

	def configure(self, page_size: str, orientation: str, margin: str) -> PageSpec:
		self.page_spec = build_page_spec(page_size, orientation, margin)
		return self.page_spec

	#============================================
	def _build(
		self,
		kind: str,
		base_name: str | None,
		output_dir: pathlib.Path | None = None,
	) -> tuple[OutputArtifact, pathlib.Path | None]:
		"""
		Build a document from a snapshot of the collection.

		The new artifact replaces the stored one only after the build, and
		the write when an output directory is given, have both succeeded.

		Args:
			kind: "preview" or "download".
			base_name: User-supplied output base name.
			output_dir: Directory to write the PDF into, None to keep it in memory.

		Returns:
			Tuple of (new OutputArtifact, written path or None).
		"""
		if not self._build_lock.acquire(blocking=False):
			raise BuildInProgressError("A conversion is already running.")
		try:
			images = self.collection.snapshot()
			result = build_document(
				images,
				self.page_spec,
				document_factory=self._document_factory,
				verbose=self.verbose,
			)
			artifact = OutputArtifact(
				kind=kind,
				filename=resolve_output_filename(base_name),
				result=result,
			)
			output_path = None
			if output_dir is not None:
				output_path = write_pdf(output_dir, artifact.filename, artifact.pdf_bytes)
			self.release_artifact()
			self.artifact = artifact
			return (artifact, output_path)
		finally:
			self._build_lock.release()

	def preview(self, base_name: str | None = None) -> OutputArtifact:
		artifact, _output_path = self._build("preview", base_name)
		return artifact

	#============================================
	def export(self, base_name: str | None, output_dir: pathlib.Path) -> pathlib.Path:
		"""
		Build the document and write it to disk.

		Args:
			base_name: Output base name; blank uses the default name.
			output_dir: Directory for the PDF.

		Returns:
			Path of the written PDF.
		"""
		_artifact, output_path = self._build("download", base_name, output_dir)
		return output_path

	def release_artifact(self) -> None:
		self.artifact = None

	def dismiss_preview(self) -> None:
		if self.artifact is not None and self.artifact.kind == "preview":
			self.release_artifact()

	def clear(self) -> None:
		"""
		Empty the collection and drop any built document.
		"""
		self.collection.clear()
		self.release_artifact()
