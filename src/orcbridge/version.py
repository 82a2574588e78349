# src/orcbridge/version.py
VERSION = "0.3.0"
