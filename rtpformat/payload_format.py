"""
Payload format of a single RTP track.

In RTSP playback the format information comes from the SDP in the DESCRIBE
response. Within each track's media description, the `rtpmap` and `fmtp`
attributes are what lets us recreate the media format.
"""
from types import MappingProxyType
import logging
import string

from rtpformat.errors import InvalidArgument, UnsupportedMediaType
from rtpformat.mime_types import MimeType, PcmEncoding
from rtpformat.sdp import MediaDescription

from typing import Any, Dict, Hashable, Mapping


logger = logging.getLogger(__name__)

RTP_MEDIA_AC3 = "AC3"
RTP_MEDIA_AMR = "AMR"
RTP_MEDIA_AMR_WB = "AMR-WB"
RTP_MEDIA_MPEG4_GENERIC = "MPEG4-GENERIC"
RTP_MEDIA_MPEG4_VIDEO = "MP4V-ES"
RTP_MEDIA_H263_1998 = "H263-1998"
RTP_MEDIA_H263_2000 = "H263-2000"
RTP_MEDIA_H264 = "H264"
RTP_MEDIA_H265 = "H265"
RTP_MEDIA_OPUS = "OPUS"
RTP_MEDIA_PCM_L8 = "L8"
RTP_MEDIA_PCM_L16 = "L16"
RTP_MEDIA_PCMA = "PCMA"
RTP_MEDIA_PCMU = "PCMU"
RTP_MEDIA_VP8 = "VP8"
RTP_MEDIA_VP9 = "VP9"

# Encoding names are case-insensitive (RFC 4566 Section 6), keys are upper case
RTP_MEDIA_TO_MIME_TYPE: Mapping[str, MimeType] = MappingProxyType(
    {
        RTP_MEDIA_AC3: MimeType.AUDIO_AC3,
        RTP_MEDIA_AMR: MimeType.AUDIO_AMR_NB,
        RTP_MEDIA_AMR_WB: MimeType.AUDIO_AMR_WB,
        RTP_MEDIA_MPEG4_GENERIC: MimeType.AUDIO_AAC,
        RTP_MEDIA_OPUS: MimeType.AUDIO_OPUS,
        RTP_MEDIA_PCM_L8: MimeType.AUDIO_RAW,
        RTP_MEDIA_PCM_L16: MimeType.AUDIO_RAW,
        RTP_MEDIA_PCMA: MimeType.AUDIO_ALAW,
        RTP_MEDIA_PCMU: MimeType.AUDIO_MLAW,
        RTP_MEDIA_H263_1998: MimeType.VIDEO_H263,
        RTP_MEDIA_H263_2000: MimeType.VIDEO_H263,
        RTP_MEDIA_H264: MimeType.VIDEO_H264,
        RTP_MEDIA_H265: MimeType.VIDEO_H265,
        RTP_MEDIA_MPEG4_VIDEO: MimeType.VIDEO_MP4V,
        RTP_MEDIA_VP8: MimeType.VIDEO_VP8,
        RTP_MEDIA_VP9: MimeType.VIDEO_VP9,
    }
)

# ASCII-only case folding, str.upper() would map "ſ" to "S"
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)

_RTP_MEDIA_TO_PCM_ENCODING = {
    RTP_MEDIA_PCM_L8: PcmEncoding.PCM_8BIT,
    RTP_MEDIA_PCM_L16: PcmEncoding.PCM_16BIT_BIG_ENDIAN,
}


def ascii_upper(value: str) -> str:
    return value.translate(_ASCII_UPPER)


def is_format_supported(media_description: MediaDescription) -> bool:
    """Returns whether the format of a media description is supported."""
    media_encoding = media_description.rtp_map_attribute.media_encoding
    return ascii_upper(media_encoding) in RTP_MEDIA_TO_MIME_TYPE


def get_mime_type_from_rtp_media_type(media_type: str) -> MimeType:
    """
    Gets the MIME type that is associated with the RTP media type.

    For instance, RTP media type "H264" maps to `MimeType.VIDEO_H264`.
    Raises `UnsupportedMediaType` when the media type is not recognized, so
    check with `is_format_supported` first.
    """
    normalized_media_type = ascii_upper(media_type)
    if normalized_media_type not in RTP_MEDIA_TO_MIME_TYPE:
        raise UnsupportedMediaType(media_type)

    mime_type = RTP_MEDIA_TO_MIME_TYPE[normalized_media_type]
    logger.debug(f"RTP media type {media_type} maps to {mime_type}")
    return mime_type


def get_raw_pcm_encoding_type(media_encoding: str) -> PcmEncoding:
    """Returns the PCM encoding for `L8` or `L16`, the token must match exactly."""
    if media_encoding not in _RTP_MEDIA_TO_PCM_ENCODING:
        raise InvalidArgument(
            f"Expected {RTP_MEDIA_PCM_L8} or {RTP_MEDIA_PCM_L16}, got {media_encoding!r}"
        )

    return _RTP_MEDIA_TO_PCM_ENCODING[media_encoding]


class RtpPayloadFormat:
    """
    The payload format used in RTP: the media format plus the fields that are
    specific to RTP.

    Parameters:
    format: The media format, any hashable value with value equality (usually a
        `MediaFormat`).
    rtp_payload_type: The payload type assigned in the rtpmap attribute.
    clock_rate: The clock rate in Hz.
    fmtp_parameters: The format parameters from the fmtp attribute (RFC 4566
        Section 6), empty if unset. The keys are defined per payload format,
        for instance RFC 3640 Section 4.1 defines `profile-level-id` and
        `config`. The mapping is copied.
    """

    def __init__(
        self,
        format: Hashable,
        rtp_payload_type: int,
        clock_rate: int,
        fmtp_parameters: Mapping[str, str],
    ):
        self._rtp_payload_type = rtp_payload_type
        self._clock_rate = clock_rate
        self._format = format
        self._fmtp_parameters: Mapping[str, str] = MappingProxyType(
            dict(fmtp_parameters)
        )

    @property
    def rtp_payload_type(self) -> int:
        return self._rtp_payload_type

    @property
    def clock_rate(self) -> int:
        return self._clock_rate

    @property
    def format(self) -> Hashable:
        return self._format

    @property
    def fmtp_parameters(self) -> Mapping[str, str]:
        return self._fmtp_parameters

    @property
    def av_codec_name(self) -> str:
        return self._format.av_codec_name

    def __eq__(self, other: Any) -> bool:
        if self is other:
            return True
        if type(other) is not type(self):
            return NotImplemented
        return (
            self._rtp_payload_type == other._rtp_payload_type
            and self._clock_rate == other._clock_rate
            and self._format == other._format
            and dict(self._fmtp_parameters) == dict(other._fmtp_parameters)
        )

    def __hash__(self) -> int:
        return hash(
            (
                self._rtp_payload_type,
                self._clock_rate,
                self._format,
                frozenset(self._fmtp_parameters.items()),
            )
        )

    def __repr__(self) -> str:
        fmtp: Dict[str, str] = dict(self._fmtp_parameters)
        return (
            f"{type(self).__name__}(format={self._format!r}, "
            f"rtp_payload_type={self._rtp_payload_type}, "
            f"clock_rate={self._clock_rate}, fmtp_parameters={fmtp!r})"
        )
