"""Street View drive-through video builder.

Assumptions:
- The track is a single GPX track (or route) or a CSV of latitude/longitude rows.
- ffmpeg is on PATH and a Street View Static API key is available.
- The frames folder is scratch space and is wiped at the start of every run.
"""
from streetview_drive.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
