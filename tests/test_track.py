from base64 import b64decode
import unittest
from unittest import mock

import sdp_transform

from rtpformat.errors import UnsupportedMediaType
from rtpformat.media_format import MediaFormat
from rtpformat.mime_types import MimeType, PcmEncoding
from rtpformat.payload_format import RtpPayloadFormat
from rtpformat.sdp import MediaDescription, RtpMapAttribute
from rtpformat.track import (
    H264_STARTING_SEQUENCE,
    generate_payload_format,
    get_payload_formats,
    is_decoder_available,
)


SPS = "Z0IAH5WoFAFuQA=="
PPS = "aM48gA=="


def make_media_description(
    media_type: str,
    payload_type: int,
    media_encoding: str,
    clock_rate: int,
    channels=None,
    fmtp=None,
) -> MediaDescription:
    return MediaDescription(
        media_type=media_type,
        rtp_map_attribute=RtpMapAttribute(payload_type, media_encoding, clock_rate, channels),
        format_parameters=fmtp or {},
    )


class TestGeneratePayloadFormat(unittest.TestCase):
    def test_h264(self) -> None:
        fmtp = {
            "packetization-mode": "1",
            "profile-level-id": "42001F",
            "sprop-parameter-sets": f"{SPS},{PPS}",
        }
        payload_format = generate_payload_format(
            make_media_description("video", 96, "H264", 90000, fmtp=fmtp)
        )

        self.assertEqual(payload_format.rtp_payload_type, 96)
        self.assertEqual(payload_format.clock_rate, 90000)
        self.assertEqual(dict(payload_format.fmtp_parameters), fmtp)
        self.assertEqual(
            payload_format.format,
            MediaFormat(
                sample_mime_type=MimeType.VIDEO_H264,
                codecs="avc1.42001f",
                initialization_data=(
                    H264_STARTING_SEQUENCE + b64decode(SPS),
                    H264_STARTING_SEQUENCE + b64decode(PPS),
                ),
            ),
        )
        self.assertEqual(payload_format.av_codec_name, "h264")

    def test_h264_invalid_sprop(self) -> None:
        fmtp = {"sprop-parameter-sets": "not base64!"}
        with self.assertRaises(ValueError):
            generate_payload_format(
                make_media_description("video", 96, "H264", 90000, fmtp=fmtp)
            )

    def test_h265(self) -> None:
        fmtp = {"sprop-vps": "QAEMAf//", "sprop-sps": "QgEBAWA=", "sprop-pps": "RAHA8vA8kA=="}
        payload_format = generate_payload_format(
            make_media_description("video", 98, "h265", 90000, fmtp=fmtp)
        )

        self.assertEqual(payload_format.format.sample_mime_type, MimeType.VIDEO_H265)
        self.assertEqual(len(payload_format.format.initialization_data), 3)
        for nal_unit in payload_format.format.initialization_data:
            self.assertTrue(nal_unit.startswith(H264_STARTING_SEQUENCE))
        self.assertEqual(payload_format.av_codec_name, "hevc")

    def test_mp4v_es(self) -> None:
        fmtp = {"profile-level-id": "1", "config": "000001B001"}
        payload_format = generate_payload_format(
            make_media_description("video", 96, "MP4V-ES", 90000, fmtp=fmtp)
        )

        self.assertEqual(
            payload_format.format.initialization_data, (bytes.fromhex("000001B001"),)
        )
        self.assertEqual(payload_format.format.extradata, bytes.fromhex("000001B001"))

    def test_mpeg4_generic(self) -> None:
        fmtp = {"streamtype": "5", "mode": "AAC-hbr", "config": "1210"}
        payload_format = generate_payload_format(
            make_media_description("audio", 97, "mpeg4-generic", 44100, 2, fmtp)
        )

        self.assertEqual(
            payload_format.format,
            MediaFormat(
                sample_mime_type=MimeType.AUDIO_AAC,
                sample_rate=44100,
                channel_count=2,
                codecs="mp4a.40.2",
                initialization_data=(b"\x12\x10",),
            ),
        )

    def test_mpeg4_generic_invalid_config(self) -> None:
        fmtp = {"config": "zz"}
        with self.assertRaises(ValueError):
            generate_payload_format(
                make_media_description("audio", 97, "MPEG4-GENERIC", 44100, fmtp=fmtp)
            )

    def test_raw_pcm_keeps_bit_depth(self) -> None:
        l16 = generate_payload_format(make_media_description("audio", 97, "l16", 44100, 2))
        l8 = generate_payload_format(make_media_description("audio", 98, "L8", 8000))

        self.assertEqual(l16.format.sample_mime_type, MimeType.AUDIO_RAW)
        self.assertEqual(l16.format.pcm_encoding, PcmEncoding.PCM_16BIT_BIG_ENDIAN)
        self.assertEqual(l16.format.channel_count, 2)
        self.assertEqual(l16.format.sample_rate, 44100)
        self.assertEqual(l16.av_codec_name, "pcm_s16be")

        self.assertEqual(l8.format.sample_mime_type, MimeType.AUDIO_RAW)
        self.assertEqual(l8.format.pcm_encoding, PcmEncoding.PCM_8BIT)
        self.assertEqual(l8.format.channel_count, 1)
        self.assertEqual(l8.av_codec_name, "pcm_u8")

    def test_default_channel_count(self) -> None:
        pcmu = generate_payload_format(make_media_description("audio", 0, "PCMU", 8000))
        opus = generate_payload_format(make_media_description("audio", 111, "opus", 48000))

        self.assertEqual(pcmu.format.channel_count, 1)
        self.assertEqual(pcmu.av_codec_name, "pcm_mulaw")
        self.assertEqual(opus.format.channel_count, 2)

    def test_video_without_fmtp_builder(self) -> None:
        payload_format = generate_payload_format(
            make_media_description("video", 100, "VP8", 90000)
        )
        self.assertEqual(payload_format.format, MediaFormat(MimeType.VIDEO_VP8))
        self.assertEqual(dict(payload_format.fmtp_parameters), {})

    def test_unsupported(self) -> None:
        with self.assertRaises(UnsupportedMediaType) as ctx:
            generate_payload_format(make_media_description("audio", 9, "G722", 8000))
        self.assertEqual(ctx.exception.media_type, "G722")

    def test_same_description_gives_equal_formats(self) -> None:
        fmtp = {"sprop-parameter-sets": f"{SPS},{PPS}", "packetization-mode": "1"}
        first = generate_payload_format(
            make_media_description("video", 96, "H264", 90000, fmtp=fmtp)
        )
        second = generate_payload_format(
            make_media_description("video", 96, "h264", 90000, fmtp=dict(reversed(fmtp.items())))
        )
        self.assertEqual(first, second)
        self.assertEqual(hash(first), hash(second))


SESSION_SDP = "\r\n".join(
    (
        "v=0",
        "o=- 1 1 IN IP4 192.168.1.10",
        "s=Session streamed by camera",
        "t=0 0",
        "m=video 0 RTP/AVP 96",
        "a=rtpmap:96 H264/90000",
        f"a=fmtp:96 packetization-mode=1; sprop-parameter-sets={SPS},{PPS}",
        "a=control:trackID=1",
        "m=audio 0 RTP/AVP 9",
        "a=rtpmap:9 G722/8000",
        "a=control:trackID=2",
        "m=audio 0 RTP/AVP 0",
        "a=rtpmap:0 PCMU/8000",
        "",
    )
)


MALFORMED_SDP = "\r\n".join(
    (
        "v=0",
        "o=- 1 1 IN IP4 192.168.1.10",
        "s=Session streamed by camera",
        "t=0 0",
        "m=video 0 RTP/AVP 96",
        "a=rtpmap:96 H264/90000",
        "a=fmtp:96 packetization-mode=1; sprop-parameter-sets=%%%,aM48gA==",
        "a=control:trackID=1",
        "m=audio 0 RTP/AVP 8",
        "a=rtpmap:8 PCMA/8000",
        "a=control:trackID=2",
        "",
    )
)


class TestGetPayloadFormats(unittest.TestCase):
    def test_skips_unsupported_tracks(self) -> None:
        sdp = sdp_transform.parse(SESSION_SDP)

        with self.assertLogs("rtpformat.track", level="WARNING") as logs:
            payload_formats = get_payload_formats(sdp)

        self.assertEqual(list(payload_formats), ["trackID=1", "2"])
        self.assertEqual(payload_formats["trackID=1"].format.sample_mime_type, MimeType.VIDEO_H264)
        self.assertEqual(payload_formats["2"].rtp_payload_type, 0)
        self.assertEqual(payload_formats["2"].format.sample_mime_type, MimeType.AUDIO_MLAW)
        self.assertEqual(len(logs.records), 1)
        self.assertIn("trackID=2", logs.output[0])
        self.assertIn("G722", logs.output[0])

    def test_malformed_track_is_reported_as_malformed(self) -> None:
        sdp = sdp_transform.parse(MALFORMED_SDP)

        with self.assertLogs("rtpformat.track", level="WARNING") as logs:
            payload_formats = get_payload_formats(sdp)

        self.assertEqual(list(payload_formats), ["trackID=2"])
        self.assertEqual(len(logs.records), 1)
        self.assertIn("trackID=1", logs.output[0])
        self.assertIn("malformed", logs.output[0])
        self.assertIn("sprop-parameter-sets", logs.output[0])


class TestIsDecoderAvailable(unittest.TestCase):
    def test_checks_pyav_codecs(self) -> None:
        payload_format = RtpPayloadFormat(MediaFormat(MimeType.VIDEO_VP9), 98, 90000, {})

        with mock.patch("rtpformat.track.codecs_available", {"vp9"}):
            self.assertTrue(is_decoder_available(payload_format))

        with mock.patch("rtpformat.track.codecs_available", {"h264"}):
            self.assertFalse(is_decoder_available(payload_format))


if __name__ == "__main__":
    unittest.main()
