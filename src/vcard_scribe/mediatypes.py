from __future__ import annotations

from typing import ClassVar

# Content types for PHOTO/LOGO (images), SOUND and KEY. Each value carries
# the 2.1/3.0 TYPE value, the 4.0 MEDIATYPE and a file extension so a type
# can be recovered from whichever of the three a vCard happens to carry.


class MediaTypeParameter:
    _known: ClassVar[list["MediaTypeParameter"]]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._known = []

    def __init__(self, value: str | None, media_type: str | None = None, extension: str | None = None):
        self.value = value
        self.media_type = media_type
        self.extension = extension

    @classmethod
    def _define(cls, value: str, media_type: str, extension: str):
        member = cls(value, media_type, extension)
        cls._known.append(member)
        return member

    @classmethod
    def find(cls, type_value: str | None = None, media_type: str | None = None, extension: str | None = None):
        for member in cls._known:
            if type_value is not None and member.value.lower() != type_value.lower():
                continue
            if media_type is not None and member.media_type.lower() != media_type.lower():
                continue
            if extension is not None and member.extension.lower() != extension.lower():
                continue
            return member
        return None

    @classmethod
    def get(cls, type_value: str | None = None, media_type: str | None = None, extension: str | None = None):
        """Like :meth:`find` but builds an ad-hoc member when nothing matches."""
        found = cls.find(type_value, media_type, extension)
        if found is not None:
            return found
        return cls(type_value, media_type, extension)

    @classmethod
    def all(cls) -> list:
        return list(cls._known)

    def __eq__(self, other) -> bool:
        if not isinstance(other, MediaTypeParameter):
            return NotImplemented
        return (
            _lower(self.value) == _lower(other.value)
            and _lower(self.media_type) == _lower(other.media_type)
            and _lower(self.extension) == _lower(other.extension)
        )

    def __hash__(self) -> int:
        return hash((_lower(self.value), _lower(self.media_type), _lower(self.extension)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r}, {self.media_type!r}, {self.extension!r})"


def _lower(text: str | None) -> str | None:
    return text.lower() if text is not None else None


class ImageType(MediaTypeParameter):
    pass


ImageType.GIF = ImageType._define("GIF", "image/gif", "gif")
ImageType.JPEG = ImageType._define("JPEG", "image/jpeg", "jpg")
ImageType.PNG = ImageType._define("PNG", "image/png", "png")
ImageType.BMP = ImageType._define("BMP", "image/bmp", "bmp")
ImageType.TIFF = ImageType._define("TIFF", "image/tiff", "tiff")
ImageType.SVG = ImageType._define("SVG", "image/svg+xml", "svg")


class SoundType(MediaTypeParameter):
    pass


SoundType.AAC = SoundType._define("AAC", "audio/aac", "aac")
SoundType.MIDI = SoundType._define("MIDI", "audio/midi", "mid")
SoundType.MP3 = SoundType._define("MP3", "audio/mp3", "mp3")
SoundType.MPEG = SoundType._define("MPEG", "audio/mpeg", "mpeg")
SoundType.OGG = SoundType._define("OGG", "audio/ogg", "ogg")
SoundType.WAV = SoundType._define("WAV", "audio/wav", "wav")


class KeyType(MediaTypeParameter):
    pass


KeyType.GPG = KeyType._define("GPG", "application/gpg", "gpg")
KeyType.PGP = KeyType._define("PGP", "application/pgp-keys", "pgp")
KeyType.X509 = KeyType._define("X509", "application/x509-ca-cert", "crt")
