from enum import Enum


class MimeType(Enum):
    AUDIO_AC3 = "audio/ac3"
    AUDIO_AMR_NB = "audio/3gpp"
    AUDIO_AMR_WB = "audio/amr-wb"
    AUDIO_AAC = "audio/mp4a-latm"
    AUDIO_OPUS = "audio/opus"
    AUDIO_RAW = "audio/raw"
    AUDIO_ALAW = "audio/g711-alaw"
    AUDIO_MLAW = "audio/g711-mlaw"
    VIDEO_H263 = "video/3gpp"
    VIDEO_H264 = "video/avc"
    VIDEO_H265 = "video/hevc"
    VIDEO_MP4V = "video/mp4v-es"
    VIDEO_VP8 = "video/x-vnd.on2.vp8"
    VIDEO_VP9 = "video/x-vnd.on2.vp9"

    @property
    def is_audio(self) -> bool:
        return self.value.startswith("audio/")

    @property
    def is_video(self) -> bool:
        return self.value.startswith("video/")

    def __str__(self) -> str:
        return self.value


class PcmEncoding(Enum):
    # RTP L8 is offset-binary, L16 is network byte order (RFC 3551 Section 4.5.10-11)
    PCM_8BIT = "pcm_u8"
    PCM_16BIT_BIG_ENDIAN = "pcm_s16be"

    @property
    def av_codec_name(self) -> str:
        return self.value


# FFmpeg decoder names, see `ff_rtp_codec_id` and the dynamic handlers in libavformat
MIME_TYPE_TO_AV_CODEC = {
    MimeType.AUDIO_AC3: "ac3",
    MimeType.AUDIO_AMR_NB: "amrnb",
    MimeType.AUDIO_AMR_WB: "amrwb",
    MimeType.AUDIO_AAC: "aac",
    MimeType.AUDIO_OPUS: "opus",
    MimeType.AUDIO_ALAW: "pcm_alaw",
    MimeType.AUDIO_MLAW: "pcm_mulaw",
    MimeType.VIDEO_H263: "h263",
    MimeType.VIDEO_H264: "h264",
    MimeType.VIDEO_H265: "hevc",
    MimeType.VIDEO_MP4V: "mpeg4",
    MimeType.VIDEO_VP8: "vp8",
    MimeType.VIDEO_VP9: "vp9",
}
