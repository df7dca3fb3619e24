import os

# Elasticsearch connection
ES_HOST = os.environ.get("STASHQUERY_ES_HOST", "localhost")
ES_PORT = int(os.environ.get("STASHQUERY_ES_PORT", "9200"))
ES_SCHEME = os.environ.get("STASHQUERY_ES_SCHEME", "http")
REQUEST_TIMEOUT = int(os.environ.get("STASHQUERY_REQUEST_TIMEOUT", "60"))

# Daily indices are named {prefix}{yyyy.mm.dd}
INDEX_PREFIXES = [
    prefix.strip()
    for prefix in os.environ.get("STASHQUERY_INDEX_PREFIXES", "logstash-").split(",")
    if prefix.strip()
] or ["logstash-"]
INDEX_DATE_FORMAT = "%Y.%m.%d"
ALL_INDICES = "_all"

# Scroll configuration
SCROLL_SIZE = int(os.environ.get("STASHQUERY_SCROLL_SIZE", "100"))
SCROLL_TIME = os.environ.get("STASHQUERY_SCROLL_TIME", "30m")

# Number of lines buffered before they are appended to the output file
FLUSH_SIZE = int(os.environ.get("STASHQUERY_FLUSH_SIZE", "1000"))

# Field searched by the query string and written to the output
MESSAGE_FIELD = "message"
TIMESTAMP_FIELD = "@timestamp"
