"""Constants shared by the LUT decoders and the watermark layout code."""

# Accepted cube sizes for headered and inferred binary/strip LUTs
MIN_LUT_SIZE = 8
MAX_LUT_SIZE = 128

# Extension groups used to pick a LUT decoder (compared lower-case)
CUBE_EXTENSIONS = (".cube",)
IMAGE_LUT_EXTENSIONS = (".png", ".webp", ".jpg", ".jpeg")
BINARY_LUT_EXTENSIONS = (".bin", "")
ENCRYPTED_SUFFIX = ".enc"

# Vivo templates are authored at 3x density: a 1080 px wide template has
# element rectangles in a 360 unit wide reference space
VIVO_TEMPLATE_DPI = 3.0
VIVO_DEFAULT_CONTENT_BOTTOM = 1395.0
VIVO_DEFAULT_BAR_COLOR = -65794  # 0xFFFEFEFE as a signed Android color int
VIVO_DIVIDER_GRAY = 0.46

# Vivo typeface ids -> font file names
VIVO_FONT_FILES = {
    0: "Roboto-Bold.ttf",
    1: "vivotype-Heavy.ttf",
    2: "vivoCameraVF.ttf",
    3: "vivo-Regular.otf",
    4: "ZEISSFrutigerNextW1G-Bold.ttf",
    5: "Roboto-Bold.ttf",
    6: "IQOOTYPE-Bold.ttf",
    7: "vivoSansExpVF.ttf",
    8: "vivoCameraVF.ttf",
    9: "IQOOTYPE-Bold.ttf",
    10: "vivotypeSimple-Bold.ttf",
}
VIVO_DEFAULT_FONT_FILE = "Roboto-Bold.ttf"

# Tecno modes are laid out against a 1080 px wide bar
TECNO_REFERENCE_WIDTH = 1080.0
TECNO_DEFAULT_BAR_SIZE = (1080.0, 113.0)
TECNO_DEFAULT_BRAND = "TECNO"
TECNO_ICON_GAP = 5.0
TECNO_ICON_VERTICAL_NUDGE = 0.10
