import io
import pathlib

import PIL.Image

import pytest

import photo_pdf_converter.collection
import photo_pdf_converter.errors


#============================================
def build_collection(make_raw_file, count: int) -> photo_pdf_converter.collection.ImageCollection:
	"""
	Build a collection with numbered JPEG images.

	Args:
		make_raw_file: RawFile factory fixture.
		count: Number of images.

	Returns:
		ImageCollection.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	for index in range(count):
		collection.add(make_raw_file(name=f"photo_{index}.jpg", width=40 + index, height=30))
	return collection


#============================================
def names(collection: photo_pdf_converter.collection.ImageCollection) -> list[str]:
	return [image.name for image in collection]


#============================================
def test_add_assigns_fresh_state(make_raw_file) -> None:
	"""
	Added images get an id, no rotation, decoded size and the declared format.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	jpeg = collection.add(make_raw_file(name="a.jpg", width=80, height=60))
	png = collection.add(make_raw_file(name="b.png", content_type="IMAGE/PNG"))
	assert len(collection) == 2
	assert jpeg.image_id != png.image_id
	assert jpeg.rotation_degrees == 0
	assert (jpeg.width, jpeg.height) == (80, 60)
	assert jpeg.image_format == "jpeg"
	assert png.image_format == "png"
	assert names(collection) == ["a.jpg", "b.png"]


#============================================
def test_add_accepts_jpg_content_type(make_raw_file) -> None:
	"""
	The non-standard image/jpg type is accepted as JPEG.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	image = collection.add(make_raw_file(content_type="image/jpg"))
	assert image.image_format == "jpeg"


#============================================
def test_add_blank_name_uses_fallback(make_raw_file) -> None:
	"""
	Files without a name get the fallback label.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	image = collection.add(make_raw_file(name=""))
	assert image.name == "photo"


#============================================
def test_add_rejects_unsupported_type(make_raw_file) -> None:
	"""
	Other content types raise UnsupportedFormatError and leave the collection alone.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	with pytest.raises(photo_pdf_converter.errors.UnsupportedFormatError):
		collection.add(make_raw_file(name="photo.gif", content_type="image/gif"))
	assert len(collection) == 0


#============================================
def test_add_rejects_corrupt_data() -> None:
	"""
	Undecodable content raises DecodeError.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	raw_file = photo_pdf_converter.collection.RawFile(
		name="broken.jpg",
		content_type="image/jpeg",
		data=b"not an image",
	)
	with pytest.raises(photo_pdf_converter.errors.DecodeError):
		collection.add(raw_file)
	assert len(collection) == 0


#============================================
def test_batch_skips_unsupported_file(make_raw_file) -> None:
	"""
	A bad file in the middle of a batch is reported and the rest are added.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	raw_files = [
		make_raw_file(name="one.jpg"),
		make_raw_file(name="two.txt", content_type="text/plain"),
		make_raw_file(name="three.png", content_type="image/png"),
	]
	report = collection.add_files(raw_files)
	assert len(collection) == 2
	assert names(collection) == ["one.jpg", "three.png"]
	assert [image.name for image in report.added] == ["one.jpg", "three.png"]
	assert len(report.failures) == 1
	name, message = report.failures[0]
	assert name == "two.txt"
	assert "unsupported format" in message
	assert "text/plain" in message


#============================================
def test_batch_skips_corrupt_file(make_raw_file) -> None:
	"""
	Decode failures are per file and later files are still added.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	broken = photo_pdf_converter.collection.RawFile(
		name="broken.png",
		content_type="image/png",
		data=b"\x89PNG broken",
	)
	report = collection.add_files([broken, make_raw_file(name="ok.jpg")])
	assert names(collection) == ["ok.jpg"]
	assert report.failures == [("broken.png", "Could not load broken.png. Please try again.")]


#============================================
def test_empty_batch_reports_message() -> None:
	"""
	An empty selection adds nothing and reports a message.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	report = collection.add_files([])
	assert report.added == []
	assert len(report.failures) == 1


#============================================
def test_remove_shifts_and_keeps_ids(make_raw_file) -> None:
	"""
	Removal shifts later images down without touching their ids.
	"""
	collection = build_collection(make_raw_file, 3)
	ids_before = [image.image_id for image in collection]
	removed = collection.remove(1)
	assert removed.name == "photo_1.jpg"
	assert names(collection) == ["photo_0.jpg", "photo_2.jpg"]
	assert [image.image_id for image in collection] == [ids_before[0], ids_before[2]]


#============================================
def test_remove_out_of_range(make_raw_file) -> None:
	"""
	Out of range removal raises and changes nothing.
	"""
	collection = build_collection(make_raw_file, 2)
	with pytest.raises(photo_pdf_converter.errors.InvalidPositionError):
		collection.remove(2)
	with pytest.raises(IndexError):
		collection.remove(-1)
	assert len(collection) == 2


#============================================
def test_readd_gets_new_id(make_raw_file) -> None:
	"""
	Removing and re-adding the same file yields a different id.
	"""
	collection = photo_pdf_converter.collection.ImageCollection()
	raw_file = make_raw_file(name="same.jpg")
	first = collection.add(raw_file)
	collection.remove(0)
	second = collection.add(raw_file)
	assert first.image_id != second.image_id


#============================================
def test_move_swaps_neighbors(make_raw_file) -> None:
	"""
	Moving by one swaps with the neighbor.
	"""
	collection = build_collection(make_raw_file, 3)
	assert collection.move(2, -1)
	assert names(collection) == ["photo_0.jpg", "photo_2.jpg", "photo_1.jpg"]
	assert collection.move(0, 1)
	assert names(collection) == ["photo_2.jpg", "photo_0.jpg", "photo_1.jpg"]


#============================================
def test_move_at_edges_is_noop(make_raw_file) -> None:
	"""
	Moving the first image up or the last image down does nothing.
	"""
	collection = build_collection(make_raw_file, 3)
	before = names(collection)
	assert not collection.move(0, -1)
	assert not collection.move(2, 1)
	assert not collection.move(1, 5)
	assert names(collection) == before


#============================================
def test_move_round_trip_restores_order(make_raw_file) -> None:
	"""
	Moving up then back down restores the original order.
	"""
	collection = build_collection(make_raw_file, 5)
	before = names(collection)
	for index in range(1, len(collection)):
		collection.move(index, -1)
		collection.move(index - 1, 1)
		assert names(collection) == before


#============================================
def test_move_invalid_source(make_raw_file) -> None:
	"""
	The source position must exist.
	"""
	collection = build_collection(make_raw_file, 2)
	with pytest.raises(photo_pdf_converter.errors.InvalidPositionError):
		collection.move(4, -1)


#============================================
def test_rotate_wraps(make_raw_file) -> None:
	"""
	Rotation advances in quarter turns and wraps after 270.
	"""
	collection = build_collection(make_raw_file, 1)
	assert [collection.rotate(0) for _ in range(4)] == [90, 180, 270, 0]
	with pytest.raises(photo_pdf_converter.errors.InvalidPositionError):
		collection.rotate(1)


#============================================
def test_id_addressed_operations(make_raw_file) -> None:
	"""
	Operations addressed by id follow the image as positions change.
	"""
	collection = build_collection(make_raw_file, 3)
	target = collection.get(2)
	collection.move_by_id(target.image_id, -2)
	assert collection.position_of(target.image_id) == 0
	assert collection.rotate_by_id(target.image_id) == 90
	collection.remove_by_id(target.image_id)
	assert names(collection) == ["photo_0.jpg", "photo_1.jpg"]
	with pytest.raises(photo_pdf_converter.errors.ImageNotFoundError):
		collection.position_of(target.image_id)


#============================================
def test_snapshot_is_independent(make_raw_file) -> None:
	"""
	A snapshot keeps its order when the collection changes afterwards.
	"""
	collection = build_collection(make_raw_file, 3)
	snapshot = collection.snapshot()
	collection.move(0, 1)
	collection.remove(2)
	assert [image.name for image in snapshot] == ["photo_0.jpg", "photo_1.jpg", "photo_2.jpg"]


#============================================
def test_clear_empties_collection(make_raw_file) -> None:
	"""
	Clear removes every image.
	"""
	collection = build_collection(make_raw_file, 3)
	collection.clear()
	assert len(collection) == 0
	assert list(collection) == []


#============================================
def test_gather_and_load_paths(tmp_path: pathlib.Path, make_raw_file) -> None:
	"""
	Directories are scanned for image extensions and loaded with guessed types.
	"""
	nested = tmp_path / "album" / "day2"
	nested.mkdir(parents=True)
	(tmp_path / "album" / "b.PNG").write_bytes(make_raw_file(content_type="image/png").data)
	(tmp_path / "album" / "a.jpg").write_bytes(make_raw_file().data)
	(nested / "c.jpeg").write_bytes(make_raw_file().data)
	(tmp_path / "album" / "notes.txt").write_text("skip me", encoding="utf-8")

	paths = photo_pdf_converter.collection.gather_image_paths([str(tmp_path / "album")])
	assert [path.name for path in paths] == ["a.jpg", "b.PNG", "c.jpeg"]

	raw_files = [photo_pdf_converter.collection.load_raw_file(path) for path in paths]
	assert [raw_file.content_type for raw_file in raw_files] == ["image/jpeg", "image/png", "image/jpeg"]

	explicit = photo_pdf_converter.collection.gather_image_paths([str(tmp_path / "album" / "notes.txt")])
	assert [path.name for path in explicit] == ["notes.txt"]
	assert photo_pdf_converter.collection.load_raw_file(explicit[0]).content_type == "text/plain"


#============================================
def test_batch_skips_oversized_image(make_raw_file) -> None:
	"""
	An image over Pillow's pixel limit is reported and later files are still added.
	"""
	buffer = io.BytesIO()
	PIL.Image.new("1", (15000, 15000)).save(buffer, format="PNG")
	huge = photo_pdf_converter.collection.RawFile(
		name="huge.png",
		content_type="image/png",
		data=buffer.getvalue(),
	)
	collection = photo_pdf_converter.collection.ImageCollection()
	report = collection.add_files([huge, make_raw_file(name="ok.jpg")])
	assert names(collection) == ["ok.jpg"]
	assert [name for name, _message in report.failures] == ["huge.png"]


#============================================
def test_batch_skips_truncated_image(make_raw_file) -> None:
	"""
	A file whose header opens but whose pixel data is cut short is skipped.
	"""
	buffer = io.BytesIO()
	PIL.Image.effect_noise((400, 300), 64).save(buffer, format="PNG")
	data = buffer.getvalue()
	truncated = photo_pdf_converter.collection.RawFile(
		name="cut.png",
		content_type="image/png",
		data=data[: len(data) // 2],
	)
	with PIL.Image.open(io.BytesIO(truncated.data)) as header_only:
		assert header_only.size == (400, 300)
	collection = photo_pdf_converter.collection.ImageCollection()
	report = collection.add_files([truncated, make_raw_file(name="ok.jpg")])
	assert names(collection) == ["ok.jpg"]
	assert report.failures == [("cut.png", "Could not load cut.png. Please try again.")]


#============================================
def test_remove_releases_pixels(make_raw_file, monkeypatch) -> None:
	"""
	Removing an image closes its decoded pixels.
	"""
	collection = build_collection(make_raw_file, 2)
	target = collection.get(0)
	closed = []
	monkeypatch.setattr(target.image, "close", lambda: closed.append(target.image_id))
	collection.remove(0)
	assert closed == [target.image_id]


#============================================
def test_snapshot_keeps_rotation(make_raw_file) -> None:
	"""
	Rotating after a snapshot does not change the snapshot entries.
	"""
	collection = build_collection(make_raw_file, 2)
	collection.rotate(0)
	snapshot = collection.snapshot()
	collection.rotate(0)
	collection.rotate(1)
	assert [image.rotation_degrees for image in snapshot] == [90, 0]
	assert [image.image_id for image in snapshot] == [image.image_id for image in collection]
