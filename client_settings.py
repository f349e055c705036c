# ==========================================
# ⚙️ CLIENT CONFIGURATION FILE
# ==========================================
# Edit this file to re-brand the consultation for another salon.
import os

from dotenv import load_dotenv

load_dotenv()

# --- BRANDING ---
APP_TITLE = "MKH Hair Color Analysis"      # Shows in browser tab
PAGE_ICON = "💇‍♀️"                           # Browser tab icon
CLIENT_NAME = "MKH Professional Hair Care"
TAGLINE = "Complete your hair color analysis in just 3 minutes"

# --- REPORT ---
REPORT_PREFIX = "MKH_Hair_Analysis"         # PDF filename prefix
REFERENCE_PREFIX = "MKH"
REPORT_TITLE = "MKH Hair Color Analysis"
REPORT_SUBTITLE = "Professional Consultation Report"
FOOTER_TEXT = "MKH Professional Hair Care - Confidential Client Report"
LOGO_PATH = "/mkh-logo.jpg"

# --- EMAIL ---
EMAIL_SUBJECT = "Your Hair Consultation Form Submission"
DATES_EMAIL_SUBJECT = "Your Perfect Hair Days"

# --- LEGAL / COPY ---
DISCLAIMER_TEXT = (
    "This report is based on the information you provided and is intended as general guidance only. "
    "Final color choices, treatment timing and suitability are confirmed by your stylist during an "
    "in-salon consultation, including a strand or patch test where required."
)
REMINDER_TEXT = "We'll send you a reminder 2 weeks before each date to consult or set an appointment."
THANK_YOU_TEXT = (
    "Thank you for choosing our hair consultation service! "
    "We'll be in touch soon to schedule your perfect hair days."
)

# --- COLORS ---
PRIMARY_COLOR = "#FF7F50"    # coral headings
BACKGROUND_COLOR = "#000000"
TEXT_COLOR = "#FFFFFF"
MUTED_COLOR = "#969696"

# --- ENVIRONMENT ---
# Used to turn "/blonde/..." asset paths into absolute URLs when the file is not on disk.
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
STATIC_ASSETS_DIR = os.getenv("STATIC_ASSETS_DIR", "public")
