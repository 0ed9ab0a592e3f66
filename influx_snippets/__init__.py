"""
InfluxDB getting-started samples
HTTP apps and command line snippets built on influxdb-client
"""
__version__ = "1.0.0"
