#!/usr/bin/env python3
"""
Command line snippets: initialize a client, write data, run simple and
aggregate queries.

Usage:
    influx-snippets ping
    influx-snippets write --count 5 --interval 1
    influx-snippets query --minutes 10
    influx-snippets aggregate --minutes 10
"""
import argparse
import logging
import sys
import time
from datetime import datetime, timezone

from influxdb_client import Point

from . import config
from .database import InfluxGateway
from .flux import recent_measurement
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def initialize_client(gateway: InfluxGateway):
    gateway.connect()


def write_data(gateway: InfluxGateway, count: int = 5, interval: float = 1.0,
               measurement: str = "measurement1"):
    """Write count points with field1 = 0..count-1, separated by interval seconds"""
    for value in range(count):
        point = (
            Point(measurement)
            .tag("tagname1", "tagvalue1")
            .field("field1", value)
            .time(datetime.now(timezone.utc))
        )
        gateway.write_point(point)
        logger.info(f"Wrote {measurement} field1={value}")
        if interval and value < count - 1:
            time.sleep(interval)


def print_records(tables, out=None):
    out = out or sys.stdout
    for table in tables:
        for record in table.records:
            print(record.values, file=out)


def run_query(gateway: InfluxGateway, minutes: int = 10, measurement: str = "measurement1",
              aggregate: str = None, out=None):
    flux = recent_measurement(gateway.bucket, measurement, minutes, aggregate)
    logger.debug(f"Running query: {flux}")
    tables = gateway.query(flux)
    print_records(tables, out)
    return tables


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="InfluxDB client snippets")
    p.add_argument("--bucket", default=None, help="bucket to use (default: INFLUXDB_BUCKET)")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("ping", help="initialize a client and ping InfluxDB")

    write = sub.add_parser("write", help="write measurement1 points")
    write.add_argument("--count", type=int, default=5)
    write.add_argument("--interval", type=float, default=1.0, help="seconds between points")
    write.add_argument("--measurement", default="measurement1")

    for name, help_text in (("query", "print recent records"),
                            ("aggregate", "print the mean of recent records")):
        q = sub.add_parser(name, help=help_text)
        q.add_argument("--minutes", type=int, default=10)
        q.add_argument("--measurement", default="measurement1")

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, config.LOG_FORMAT)

    gateway = InfluxGateway(bucket=args.bucket)
    try:
        if args.command == "ping":
            initialize_client(gateway)
        elif args.command == "write":
            write_data(gateway, args.count, args.interval, args.measurement)
        elif args.command == "query":
            run_query(gateway, args.minutes, args.measurement)
        elif args.command == "aggregate":
            run_query(gateway, args.minutes, args.measurement, aggregate="mean")
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        gateway.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
