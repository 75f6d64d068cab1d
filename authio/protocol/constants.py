"""Protocol constants for frame processing."""

# Frame field sizes
LENGTH_FIELD_BYTES = 8  # big-endian unsigned 64 bit total frame length
LENGTH_FIELD_BYTEORDER = "big"

# base64 encodes every 3 digest bytes as 4 ASCII characters
BASE64_GROUP_BYTES = 3
BASE64_GROUP_CHARS = 4

# Upper bound for a single transport read while collecting a frame
READ_CHUNK_SIZE = 64 * 1024

# Markers printed around command output
HMAC_START_MARKER = "----B64-HMAC-START----"
HMAC_END_MARKER = "----B64-HMAC-END----"
MESSAGE_START_MARKER = b"----MESSAGE-START----"
MESSAGE_END_MARKER = b"----MESSAGE-END----"
