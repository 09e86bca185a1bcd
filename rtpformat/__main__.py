import sys
import argparse
import logging

import sdp_transform

from rtpformat.track import get_payload_formats, is_decoder_available


VERBOSE_HELP = "Add debug prints"
CHECK_DECODER_HELP = "Also report whether PyAV has a decoder for each track"


def format_fmtp(fmtp_parameters: dict) -> str:
    return "; ".join(f"{key}={value}" for key, value in fmtp_parameters.items())


def main(input_path: str, verbose: bool, check_decoder: bool) -> None:
    logging_level = logging.INFO
    if verbose:
        logging_level = logging.DEBUG

    logging.basicConfig(
        level=logging_level, format="[%(levelname)s][%(name)s] %(message)s"
    )
    logger = logging.getLogger(__package__)

    with open(input_path, "r") as sdp_file:
        sdp = sdp_transform.parse(sdp_file.read())

    payload_formats = get_payload_formats(sdp)
    if not payload_formats:
        logger.warning("No supported tracks found")

    for track_id, payload_format in payload_formats.items():
        line = (
            f"{track_id}: pt={payload_format.rtp_payload_type} "
            f"clock={payload_format.clock_rate} "
            f"mime={payload_format.format.sample_mime_type}"
        )
        if payload_format.fmtp_parameters:
            line += f" fmtp=[{format_fmtp(payload_format.fmtp_parameters)}]"
        if check_decoder:
            line += f" decoder={is_decoder_available(payload_format)}"
        print(line)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Resolve the RTP payload format of each track in an SDP file",
        prog=f"python -m {__package__}",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("input", help="Path to an SDP file")
    parser.add_argument("-v", "--verbose", action="store_true", help=VERBOSE_HELP)
    parser.add_argument("--check-decoder", action="store_true", help=CHECK_DECODER_HELP)
    args = parser.parse_args()

    try:
        main(args.input, args.verbose, args.check_decoder)
    except Exception as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit()
