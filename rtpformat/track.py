from base64 import b64decode
from binascii import Error as BinasciiError
import logging

from av.codec import codecs_available

from rtpformat.errors import UnsupportedMediaType
from rtpformat.media_format import MediaFormat
from rtpformat.mime_types import MimeType
from rtpformat.payload_format import (
    RtpPayloadFormat,
    ascii_upper,
    get_mime_type_from_rtp_media_type,
    get_raw_pcm_encoding_type,
    is_format_supported,
)
from rtpformat.sdp import MediaDescription, get_sdp_medias

from typing import Callable, Dict, Mapping, Optional, Tuple


logger = logging.getLogger(__name__)

H264_STARTING_SEQUENCE = b"\x00\x00\x00\x01"

DEFAULT_AUDIO_CHANNEL_COUNT = 1
# RFC 7587 Section 7: the rtpmap of Opus always advertises 2 channels
OPUS_CHANNEL_COUNT = 2

_H265_SPROP_ATTRIBUTES = (
    "sprop-vps",
    "sprop-sps",
    "sprop-pps",
)

_AAC_ESCAPE_OBJECT_TYPE = 31


def _decode_sprop(fmtp: Mapping[str, str], key: str) -> Tuple[bytes, ...]:
    nal_units = []
    for sprop_parameter_set in fmtp[key].split(","):
        if not sprop_parameter_set:
            continue
        try:
            nal_unit = b64decode(sprop_parameter_set, validate=True)
        except BinasciiError as e:
            raise ValueError(f"Invalid base64 in {key}: {e}") from e
        nal_units.append(H264_STARTING_SEQUENCE + nal_unit)
    return tuple(nal_units)


def _decode_config(fmtp: Mapping[str, str]) -> Tuple[bytes, ...]:
    if "config" not in fmtp:
        return ()
    try:
        return (bytes.fromhex(fmtp["config"]),)
    except ValueError as e:
        raise ValueError(f"Invalid hex in config: {e}") from e


def _aac_codecs_string(audio_specific_config: bytes) -> Optional[str]:
    """
    Audio object type is the first 5 bits of the AudioSpecificConfig
    (ISO/IEC 14496-3 Section 1.6.2.1), escaped to 6 more bits when all ones.
    """
    if not audio_specific_config:
        return None
    bits = int.from_bytes(audio_specific_config[:2], byteorder="big")
    bit_count = 8 * min(len(audio_specific_config), 2)
    audio_object_type = bits >> (bit_count - 5)
    if audio_object_type == _AAC_ESCAPE_OBJECT_TYPE:
        if bit_count < 11:
            return None
        audio_object_type = 32 + ((bits >> (bit_count - 11)) & 0x3F)
    return f"mp4a.40.{audio_object_type}"


def _h264_format(
    base_format: MediaFormat, fmtp: Mapping[str, str]
) -> MediaFormat:
    initialization_data: Tuple[bytes, ...] = ()
    if "sprop-parameter-sets" in fmtp:
        initialization_data = _decode_sprop(fmtp, "sprop-parameter-sets")
    else:
        logger.debug("No sprop-parameter-sets in fmtp of h264")

    codecs = None
    if "profile-level-id" in fmtp:
        codecs = f"avc1.{fmtp['profile-level-id'].lower()}"

    return MediaFormat(
        sample_mime_type=base_format.sample_mime_type,
        codecs=codecs,
        initialization_data=initialization_data,
    )


def _h265_format(
    base_format: MediaFormat, fmtp: Mapping[str, str]
) -> MediaFormat:
    initialization_data: Tuple[bytes, ...] = ()
    for sprop_attr in _H265_SPROP_ATTRIBUTES:
        if sprop_attr in fmtp:
            initialization_data += _decode_sprop(fmtp, sprop_attr)

    return MediaFormat(
        sample_mime_type=base_format.sample_mime_type,
        initialization_data=initialization_data,
    )


def _mp4v_format(
    base_format: MediaFormat, fmtp: Mapping[str, str]
) -> MediaFormat:
    return MediaFormat(
        sample_mime_type=base_format.sample_mime_type,
        initialization_data=_decode_config(fmtp),
    )


def _aac_format(base_format: MediaFormat, fmtp: Mapping[str, str]) -> MediaFormat:
    initialization_data = _decode_config(fmtp)
    codecs = None
    if initialization_data:
        codecs = _aac_codecs_string(initialization_data[0])

    return MediaFormat(
        sample_mime_type=base_format.sample_mime_type,
        sample_rate=base_format.sample_rate,
        channel_count=base_format.channel_count,
        codecs=codecs,
        initialization_data=initialization_data,
    )


_FORMAT_BUILDERS: Dict[
    MimeType, Callable[[MediaFormat, Mapping[str, str]], MediaFormat]
] = {
    MimeType.VIDEO_H264: _h264_format,
    MimeType.VIDEO_H265: _h265_format,
    MimeType.VIDEO_MP4V: _mp4v_format,
    MimeType.AUDIO_AAC: _aac_format,
}


def generate_payload_format(media_description: MediaDescription) -> RtpPayloadFormat:
    """
    Build the complete payload format of a track from its rtpmap and fmtp
    attributes.
    """
    rtp_map = media_description.rtp_map_attribute
    if not is_format_supported(media_description):
        raise UnsupportedMediaType(rtp_map.media_encoding)

    fmtp = media_description.format_parameters
    mime_type = get_mime_type_from_rtp_media_type(rtp_map.media_encoding)

    if mime_type.is_audio:
        channel_count = rtp_map.encoding_parameters
        if channel_count is None:
            if mime_type == MimeType.AUDIO_OPUS:
                channel_count = OPUS_CHANNEL_COUNT
            else:
                channel_count = DEFAULT_AUDIO_CHANNEL_COUNT

        pcm_encoding = None
        if mime_type == MimeType.AUDIO_RAW:
            pcm_encoding = get_raw_pcm_encoding_type(ascii_upper(rtp_map.media_encoding))

        media_format = MediaFormat(
            sample_mime_type=mime_type,
            sample_rate=rtp_map.clock_rate,
            channel_count=channel_count,
            pcm_encoding=pcm_encoding,
        )
    else:
        media_format = MediaFormat(sample_mime_type=mime_type)

    if mime_type in _FORMAT_BUILDERS:
        media_format = _FORMAT_BUILDERS[mime_type](media_format, fmtp)

    logger.debug(
        f"Track {media_description.control}: {rtp_map.media_encoding}/{rtp_map.clock_rate} "
        f"as {media_format}"
    )
    return RtpPayloadFormat(
        media_format, rtp_map.payload_type, rtp_map.clock_rate, fmtp
    )


def get_payload_formats(sdp: dict) -> Dict[str, RtpPayloadFormat]:
    """
    Resolve the payload format of every track in a session parsed with
    `sdp_transform.parse`. Tracks are keyed by their control attribute, or
    by their index when they have none. Unsupported or malformed tracks are
    skipped.
    """
    payload_formats: Dict[str, RtpPayloadFormat] = {}
    for index, sdp_media in enumerate(get_sdp_medias(sdp)):
        track_id = sdp_media.get("control", str(index))
        try:
            media_description = MediaDescription.from_sdp_media(sdp_media)
            payload_formats[track_id] = generate_payload_format(media_description)
        except UnsupportedMediaType as e:
            logger.warning(f"Skipping track {track_id}: {e}")
        except ValueError as e:
            logger.warning(f"Skipping track {track_id}, malformed rtpmap or fmtp: {e}")

    return payload_formats


def is_decoder_available(payload_format: RtpPayloadFormat) -> bool:
    """Whether the FFmpeg build behind PyAV has a decoder for this payload."""
    return payload_format.av_codec_name in codecs_available
