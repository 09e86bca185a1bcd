from rtpformat.errors import RtpFormatError, UnsupportedMediaType, InvalidArgument
from rtpformat.media_format import MediaFormat
from rtpformat.mime_types import MimeType, PcmEncoding
from rtpformat.payload_format import (
    RtpPayloadFormat,
    is_format_supported,
    get_mime_type_from_rtp_media_type,
    get_raw_pcm_encoding_type,
)
from rtpformat.sdp import MediaDescription, RtpMapAttribute
from rtpformat.track import (
    generate_payload_format,
    get_payload_formats,
    is_decoder_available,
)
