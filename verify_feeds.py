import argparse
import logging
import sys
from pathlib import Path

from stormrisk.config import API_BASE
from stormrisk.data.demo import demo_transport
from stormrisk.data.feeds import load_dashboard_data
from stormrisk.errors import LoadFailure
from stormrisk.export.subdistricts import export_subdistricts
from stormrisk.styling.storm import storm_categories


def main(argv=None):
    parser = argparse.ArgumentParser(description="Verify the storm-risk dashboard feeds.")
    parser.add_argument("--api", type=str, default=API_BASE, help="Feed API base URL.")
    parser.add_argument("--demo", action="store_true", help="Use the bundled synthetic feeds.")
    parser.add_argument("--export", type=Path, default=None, help="Write the sub-district CSV here.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    )
    logging.info("Loading feeds from %s", "demo transport" if args.demo else args.api)
    try:
        data = load_dashboard_data(
            base_url=args.api, transport=demo_transport() if args.demo else None
        )
    except LoadFailure as exc:
        logging.error("Feed load failed: %s", exc)
        sys.exit(1)

    print("districts", len(data.bangladesh.features))
    print("track points", len(data.amphan.features))
    print("health facilities", len(data.health.features))
    print("education facilities", len(data.education.features))
    print("stats", data.stats.model_dump())
    winds = [f.properties.max_sustained_wind for f in data.amphan.features]
    if winds:
        print("track categories", storm_categories(winds).value_counts().to_dict())

    artifact = export_subdistricts(data.bangladesh)
    print("export rows", len(artifact.rows))
    if args.export is not None:
        args.export.write_bytes(artifact.content.encode("utf-8"))
        print("export written", args.export)


if __name__ == "__main__":
    main()
