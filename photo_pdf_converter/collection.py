"""
Ordered image collection and file ingestion.
"""

# Standard Library
import dataclasses
import io
import mimetypes
import pathlib
import uuid

# PIP3 modules
import PIL.Image

# local repo modules
import photo_pdf_converter as ppc
import photo_pdf_converter.config
import photo_pdf_converter.errors


ALLOWED_CONTENT_TYPES = ppc.config.ALLOWED_CONTENT_TYPES
IMAGE_EXTENSIONS = ppc.config.IMAGE_EXTENSIONS
DEFAULT_IMAGE_NAME = ppc.config.DEFAULT_IMAGE_NAME
ROTATION_STEP = ppc.config.ROTATION_STEP

UnsupportedFormatError = ppc.errors.UnsupportedFormatError
DecodeError = ppc.errors.DecodeError
InvalidPositionError = ppc.errors.InvalidPositionError
ImageNotFoundError = ppc.errors.ImageNotFoundError


@dataclasses.dataclass
class RawFile:
	name: str
	content_type: str
	data: bytes


@dataclasses.dataclass
class SourceImage:
	image_id: str
	name: str
	image_format: str
	data: bytes
	image: PIL.Image.Image
	rotation_degrees: int = 0

	@property
	def width(self) -> int:
		return self.image.width

	@property
	def height(self) -> int:
		return self.image.height


@dataclasses.dataclass
class IngestReport:
	added: list[SourceImage] = dataclasses.field(default_factory=list)
	failures: list[tuple[str, str]] = dataclasses.field(default_factory=list)


#============================================
def load_raw_file(path: pathlib.Path) -> RawFile:
	"""
	Read a file from disk with a content type guessed from its name.

	Args:
		path: Image file path.

	Returns:
		RawFile.
	"""
	content_type, _encoding = mimetypes.guess_type(path.name)
	if content_type is None:
		content_type = "application/octet-stream"
	return RawFile(name=path.name, content_type=content_type, data=path.read_bytes())


#============================================
def gather_image_paths(inputs: list[str]) -> list[pathlib.Path]:
	"""
	Gather image paths from input paths.

	Directories are scanned recursively for image extensions and sorted by
	name. Explicit file paths are kept in the order given.

	Args:
		inputs: Input paths.

	Returns:
		List of file paths.
	"""
	paths: list[pathlib.Path] = []
	for entry in inputs:
		path = pathlib.Path(entry).expanduser().resolve()
		if path.is_dir():
			found = [
				child for child in path.rglob("*")
				if child.is_file() and child.suffix.lower() in IMAGE_EXTENSIONS
			]
			paths.extend(sorted(found, key=lambda child: str(child).lower()))
			continue
		if path.is_file():
			paths.append(path)
	return paths


#============================================
def decode_raw_file(raw_file: RawFile) -> SourceImage:
	"""
	Validate and decode a raw file into a new SourceImage.

	Args:
		raw_file: RawFile with declared content type.

	Returns:
		SourceImage with a fresh id and no rotation.
	"""
	name = raw_file.name or DEFAULT_IMAGE_NAME
	content_type = (raw_file.content_type or "").strip().lower()
	image_format = ALLOWED_CONTENT_TYPES.get(content_type)
	if image_format is None:
		raise UnsupportedFormatError(name, raw_file.content_type)
	try:
		image = PIL.Image.open(io.BytesIO(raw_file.data))
		image.load()
	except (PIL.UnidentifiedImageError, PIL.Image.DecompressionBombError, OSError, ValueError) as error:
		raise DecodeError(name) from error
	return SourceImage(
		image_id=uuid.uuid4().hex,
		name=name,
		image_format=image_format,
		data=raw_file.data,
		image=image,
	)


#============================================
class ImageCollection:
	"""
	Ordered collection of source images for one editing session.

	Positions are 0-based. Every mutation applies immediately.
	"""

	def __init__(self):
		self._images: list[SourceImage] = []

	def __len__(self) -> int:
		return len(self._images)

	def __iter__(self):
		return iter(list(self._images))

	@property
	def images(self) -> tuple[SourceImage, ...]:
		return tuple(self._images)

	def snapshot(self) -> tuple[SourceImage, ...]:
		"""
		Capture the current order and rotations for an export.

		Entries are shallow copies, so later rotations do not reach an
		export already in progress. Exports read the stored bytes, so
		removing an image mid-export does not affect its page.
		"""
		return tuple(dataclasses.replace(image) for image in self._images)

	def _check_position(self, position: int) -> None:
		if not 0 <= position < len(self._images):
			raise InvalidPositionError(
				f"Position {position} out of range for {len(self._images)} images"
			)

	def get(self, position: int) -> SourceImage:
		self._check_position(position)
		return self._images[position]

	def position_of(self, image_id: str) -> int:
		"""
		Find the current position of an image id.

		Args:
			image_id: SourceImage id.

		Returns:
			0-based position.
		"""
		for position, image in enumerate(self._images):
			if image.image_id == image_id:
				return position
		raise ImageNotFoundError(f"No image with id {image_id}")

	#============================================
	def add(self, raw_file: RawFile) -> SourceImage:
		"""
		Decode a raw file and append it to the end of the collection.

		Args:
			raw_file: RawFile with declared content type.

		Returns:
			The added SourceImage.
		"""
		source_image = decode_raw_file(raw_file)
		self._images.append(source_image)
		return source_image

	#============================================
	def add_files(self, raw_files: list[RawFile], verbose: bool = False) -> IngestReport:
		"""
		Add a batch of files, skipping the ones that fail.

		Args:
			raw_files: Files in the order they were selected.
			verbose: Print a message for every skipped file.

		Returns:
			IngestReport with added images and (name, message) failures.
		"""
		report = IngestReport()
		if not raw_files:
			report.failures.append(("", "Please select at least one image to continue."))
			return report
		for raw_file in raw_files:
			try:
				source_image = self.add(raw_file)
			except (UnsupportedFormatError, DecodeError) as error:
				report.failures.append((error.name, str(error)))
				if verbose:
					print(str(error))
				continue
			report.added.append(source_image)
		return report

	#============================================
	def remove(self, position: int) -> SourceImage:
		"""
		Remove the image at a position.

		Args:
			position: 0-based position.

		Returns:
			The removed SourceImage.
		"""
		self._check_position(position)
		source_image = self._images.pop(position)
		source_image.image.close()
		return source_image

	def remove_by_id(self, image_id: str) -> SourceImage:
		return self.remove(self.position_of(image_id))

	#============================================
	def move(self, position: int, delta: int) -> bool:
		"""
		Move an image by delta positions.

		Targets outside the collection are ignored, so moving the first
		image up or the last image down does nothing.

		Args:
			position: 0-based position of the image to move.
			delta: Offset, negative moves toward the front.

		Returns:
			True when the order changed.
		"""
		self._check_position(position)
		target = position + delta
		if target < 0 or target >= len(self._images) or target == position:
			return False
		item = self._images.pop(position)
		self._images.insert(target, item)
		return True

	def move_by_id(self, image_id: str, delta: int) -> bool:
		return self.move(self.position_of(image_id), delta)

	#============================================
	def rotate(self, position: int) -> int:
		"""
		Rotate an image a quarter turn clockwise.

		Args:
			position: 0-based position.

		Returns:
			New rotation in degrees.
		"""
		source_image = self.get(position)
		source_image.rotation_degrees = (source_image.rotation_degrees + ROTATION_STEP) % 360
		return source_image.rotation_degrees

	def rotate_by_id(self, image_id: str) -> int:
		return self.rotate(self.position_of(image_id))

	#============================================
	def clear(self) -> None:
		"""
		Remove all images and release their decoded pixels.
		"""
		images = self._images
		self._images = []
		for source_image in images:
			source_image.image.close()
