__title__ = "curlr"
__description__ = "A curl-style command line HTTP client."
__version__ = "0.1.0"
