import argparse
import json
import logging
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from hazardscan import config
from hazardscan.events.normalize import FEED_MODES, PERIODS, event_summary, fetch_hazard_events


def main():
    parser = argparse.ArgumentParser(description="Fetch normalized hazard events.")
    parser.add_argument("--hazard", default="seismic", choices=config.HAZARD_TYPES, help="Hazard domain.")
    parser.add_argument("--period", default="day", choices=PERIODS, help="Time window.")
    parser.add_argument("--magnitude", default="2.5", help="all|significant|<minimum magnitude>")
    parser.add_argument("--feed-mode", default=None, choices=FEED_MODES, help="Source for wildfire/storm events.")

    args = parser.parse_args()

    logging.basicConfig(level=config.LOG_LEVEL)
    logging.getLogger("urllib3").setLevel(logging.ERROR)

    events = fetch_hazard_events(args.hazard, args.period, args.magnitude, feed_mode=args.feed_mode)
    print(json.dumps([event_summary(e) for e in events]))


if __name__ == "__main__":
    main()
