from dataclasses import dataclass

from rtpformat.mime_types import MimeType, PcmEncoding, MIME_TYPE_TO_AV_CODEC

from typing import Optional, Tuple


@dataclass(frozen=True)
class MediaFormat:
    """
    Media format of a single track, as far as it can be derived from the SDP.

    Parameters:
    sample_mime_type: MIME type of the samples carried in the RTP payload.
    sample_rate: Audio sample rate in Hz, None for video.
    channel_count: Audio channel count, None for video.
    pcm_encoding: Sample format of raw PCM audio, None for anything else.
    codecs: RFC 6381 codecs string, if it can be derived from the fmtp.
    initialization_data: Out-of-band codec configuration (parameter sets,
        decoder specific config), in the order the decoder expects it.
    """

    sample_mime_type: MimeType
    sample_rate: Optional[int] = None
    channel_count: Optional[int] = None
    pcm_encoding: Optional[PcmEncoding] = None
    codecs: Optional[str] = None
    initialization_data: Tuple[bytes, ...] = ()

    @property
    def av_codec_name(self) -> str:
        if self.pcm_encoding is not None:
            return self.pcm_encoding.av_codec_name
        if self.sample_mime_type not in MIME_TYPE_TO_AV_CODEC:
            raise ValueError(
                f"Raw audio needs a PCM encoding to pick a decoder: {self.sample_mime_type}"
            )
        return MIME_TYPE_TO_AV_CODEC[self.sample_mime_type]

    @property
    def extradata(self) -> bytes:
        return b"".join(self.initialization_data)
