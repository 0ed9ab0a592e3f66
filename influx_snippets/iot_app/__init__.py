"""IoT sample app: local logins holding InfluxDB tokens"""
