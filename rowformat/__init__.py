# Row-Format Delegate
# ===================
# COPY-compatible validation of the options PXF forwards to the row parser.

from rowformat.copy_options import RowFormatValidator, CopyFormat, process_copy_options, parse_bool
from rowformat.encodings import canonical_encoding
