from orcbridge.io.sniffer import MAGIC, SNIFF_WINDOW, is_recognized_format

__all__ = ["MAGIC", "SNIFF_WINDOW", "is_recognized_format"]
