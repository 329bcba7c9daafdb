"""
Upload validation: classification, MIME allow-lists and per-kind size ceilings.
"""

from __future__ import annotations

import io

import pytest

from community_media.components.assets import AssetValidator, UploadInput, classify_mime_type
from community_media.domain.errors import (
    AssetValidationError,
    EmptyOrMissingError,
    SizeExceededError,
    UnsupportedTypeError,
)

MB = 1024 * 1024


@pytest.fixture
def validator(media_rules):
    return AssetValidator(media_rules.upload_policy())


class TestClassifyMimeType:
    @pytest.mark.parametrize(
        ("mime", "expected"),
        [
            ("image/jpeg", "image"),
            ("IMAGE/PNG", "image"),
            ("video/mp4", "video"),
            ("audio/mpeg", "audio"),
            ("application/pdf", "document"),
            ("text/plain", "document"),
            ("", "document"),
            (None, "document"),
        ],
    )
    def test_classification(self, mime, expected):
        assert classify_mime_type(mime) == expected

    def test_deterministic(self):
        results = {classify_mime_type("video/webm") for _ in range(50)}
        assert results == {"video"}


class TestValidateAccepts:
    @pytest.mark.parametrize("mime", ["image/jpeg", "image/png", "image/gif", "image/webp"])
    def test_allowed_images(self, validator, mime):
        assert validator.validate(UploadInput.from_bytes("a.img", mime, b"x" * 10)) == "image"

    @pytest.mark.parametrize("mime", ["video/mp4", "video/webm", "video/ogg"])
    def test_allowed_videos(self, validator, mime):
        assert validator.validate(UploadInput.from_bytes("a.vid", mime, b"x" * 10)) == "video"

    def test_mime_case_insensitive(self, validator):
        assert validator.validate(UploadInput.from_bytes("a.png", "Image/PNG", b"x")) == "image"

    def test_image_at_ceiling(self, validator):
        upload = UploadInput(
            filename="big.jpg", content_type="image/jpeg", data=b"x", byte_size=10 * MB
        )
        assert validator.validate(upload) == "image"

    def test_stream_without_declared_size(self, validator):
        upload = UploadInput(
            filename="a.png", content_type="image/png", data=io.BytesIO(b"abc")
        )
        assert upload.declared_size is None
        assert validator.validate(upload) == "image"


class TestValidateRejects:
    def test_none_upload(self, validator):
        with pytest.raises(EmptyOrMissingError):
            validator.validate(None)

    def test_missing_data(self, validator):
        with pytest.raises(EmptyOrMissingError):
            validator.validate(UploadInput(filename="a.png", content_type="image/png", data=None))

    def test_empty_data(self, validator):
        with pytest.raises(EmptyOrMissingError):
            validator.validate(UploadInput.from_bytes("a.png", "image/png", b""))

    @pytest.mark.parametrize("filename", [None, "", "   "])
    def test_missing_filename(self, validator, filename):
        with pytest.raises(EmptyOrMissingError):
            validator.validate(
                UploadInput(filename=filename, content_type="image/png", data=b"x")
            )

    def test_dot_dot_filename(self, validator):
        with pytest.raises(UnsupportedTypeError, match="Invalid file name"):
            validator.validate(UploadInput.from_bytes("../../etc/passwd.png", "image/png", b"x"))

    @pytest.mark.parametrize("mime", ["application/pdf", "audio/mpeg", "text/html", None])
    def test_unsupported_kind(self, validator, mime):
        with pytest.raises(UnsupportedTypeError) as exc:
            validator.validate(UploadInput.from_bytes("file.bin", mime, b"x"))
        assert exc.value.code == "unsupported_type"

    def test_image_subtype_not_allowed(self, validator):
        with pytest.raises(UnsupportedTypeError, match="Allowed types"):
            validator.validate(UploadInput.from_bytes("a.svg", "image/svg+xml", b"<svg/>"))

    def test_video_subtype_not_allowed(self, validator):
        with pytest.raises(UnsupportedTypeError):
            validator.validate(UploadInput.from_bytes("a.mov", "video/quicktime", b"x"))

    def test_image_over_ceiling(self, validator):
        upload = UploadInput(
            filename="huge.png", content_type="image/png", data=b"x", byte_size=10 * MB + 1
        )
        with pytest.raises(SizeExceededError) as exc:
            validator.validate(upload)
        assert exc.value.max_size == 10 * MB
        assert exc.value.kind == "image"

    def test_video_over_ceiling(self, validator):
        upload = UploadInput(
            filename="movie.mp4", content_type="video/mp4", data=b"x", byte_size=60 * MB
        )
        with pytest.raises(SizeExceededError) as exc:
            validator.validate(upload)
        assert exc.value.max_size == 50 * MB

    def test_video_size_allowed_under_video_ceiling(self, validator):
        # 20MB exceeds the image ceiling but not the video one
        upload = UploadInput(
            filename="clip.webm", content_type="video/webm", data=b"x", byte_size=20 * MB
        )
        assert validator.validate(upload) == "video"

    def test_all_rejections_are_validation_errors(self, validator):
        with pytest.raises(AssetValidationError):
            validator.validate(UploadInput.from_bytes("a.txt", "text/plain", b"x"))


class TestCheckSize:
    def test_zero_bytes(self, validator):
        with pytest.raises(EmptyOrMissingError):
            validator.check_size("image", 0, "a.png")

    def test_over_limit(self, validator):
        with pytest.raises(SizeExceededError):
            validator.check_size("video", 50 * MB + 1)

    def test_within_limit(self, validator):
        validator.check_size("video", 50 * MB)
