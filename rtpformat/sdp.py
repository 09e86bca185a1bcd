import re

from typing import Dict, List, NamedTuple, Optional


_FMTP_PARAMETER_SEPARATOR = re.compile(r";\s*")


def get_sdp_medias(sdp: dict) -> List[dict]:
    assert "media" in sdp
    return sdp["media"]


def get_codec_name_from_sdp_media(sdp_media: dict) -> str:
    if not sdp_media.get("rtp") or "codec" not in sdp_media["rtp"][0]:
        raise ValueError(
            f"Media section {sdp_media.get('type')} has no rtpmap attribute"
        )
    return sdp_media["rtp"][0]["codec"]


def parse_fmtp_config(config: str) -> Dict[str, str]:
    """
    Split the parameters of an fmtp attribute, e.g.
    `packetization-mode=1; profile-level-id=42001f`, into a dict.
    """
    fmtp_parameters: Dict[str, str] = dict()
    for parameter in _FMTP_PARAMETER_SEPARATOR.split(config.strip()):
        if not parameter:
            continue
        key, _, value = parameter.partition("=")
        fmtp_parameters[key.strip()] = value.strip()
    return fmtp_parameters


class RtpMapAttribute(NamedTuple):
    """`a=rtpmap:<payload type> <encoding name>/<clock rate>[/<encoding parameters>]`"""

    payload_type: int
    media_encoding: str
    clock_rate: int
    # Channel count for audio
    encoding_parameters: Optional[int] = None


class MediaDescription(NamedTuple):
    media_type: str
    rtp_map_attribute: RtpMapAttribute
    format_parameters: Dict[str, str]
    control: Optional[str] = None

    @classmethod
    def from_sdp_media(cls, sdp_media: dict) -> "MediaDescription":
        """Build from a media section as returned by `sdp_transform.parse`."""
        codec_name = get_codec_name_from_sdp_media(sdp_media)
        rtp_data = sdp_media["rtp"][0]
        if "rate" not in rtp_data:
            raise ValueError(f"rtpmap of {codec_name} has no clock rate")

        encoding = rtp_data.get("encoding")
        rtp_map_attribute = RtpMapAttribute(
            payload_type=int(rtp_data["payload"]),
            media_encoding=codec_name,
            clock_rate=int(rtp_data["rate"]),
            encoding_parameters=int(encoding) if encoding is not None else None,
        )

        format_parameters: Dict[str, str] = dict()
        for fmtp_data in sdp_media.get("fmtp", []):
            if int(fmtp_data["payload"]) == rtp_map_attribute.payload_type:
                format_parameters = parse_fmtp_config(fmtp_data.get("config", ""))
                break

        return cls(
            media_type=sdp_media.get("type", ""),
            rtp_map_attribute=rtp_map_attribute,
            format_parameters=format_parameters,
            control=sdp_media.get("control"),
        )
