"""Application constants."""

# Residential blocks in the community
BLOCKS = (1, 2, 3, 4)

# Pass codes are "<prefix>-<rsvp id>"
PASS_PREFIX_RESIDENT = "r"
PASS_PREFIX_GUEST = "g"

# List limits
NOTIFICATION_LIST_LIMIT = 20
VISITOR_LIST_LIMIT = 50
VISITOR_SEARCH_LIMIT = 5
VISITOR_SEARCH_MIN_LENGTH = 3
RESIDENT_SEARCH_LIMIT = 20

# WhatsApp numbers without a country code are assumed to be Indian
DEFAULT_COUNTRY_CODE = "+91"
MIN_PHONE_DIGITS = 10

# QR code rendering for emailed passes
QR_CODE_WIDTH = 200
QR_CODE_MARGIN = 1
