"""Runtime configuration defaults for billing, integrations and printing."""

from __future__ import annotations

import os

RESTAURANT_NAME = "RMS Pro"
CURRENCY_SYMBOL = "₹"
CURRENCY_CODE = "INR"
BILLING_FOOTER = "Thank you for dining with us!"
UPI_ID = "restaurant@example"

# Mock sales already recorded before startup.
INITIAL_TOTAL_SALES = 45250.50
LOW_STOCK_THRESHOLD = 10

# False keeps open orders' totals as of their last item edit when taxes change.
RECOMPUTE_OPEN_ORDERS_ON_TAX_CHANGE = False

PUBLIC_BASE_URL = os.environ.get("RMS_PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")
QR_SERVICE_URL = "https://api.qrserver.com/v1/create-qr-code/"
QR_IMAGE_SIZE = "250x250"

GEMINI_API_KEY = os.environ.get("RMS_GEMINI_API_KEY", os.environ.get("API_KEY", ""))
GEMINI_MODEL = os.environ.get("RMS_GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_TIMEOUT_SECONDS = 30

EXPORT_DIR = os.environ.get("RMS_EXPORT_DIR", "exports")
LOG_PATH = os.environ.get("RMS_LOG_PATH", "/tmp/rms.log")

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 22
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 8

# Tax invoice page geometry (A4 at 100 dpi).
INVOICE_WIDTH_PX = 827
INVOICE_HEIGHT_PX = 1169
INVOICE_MARGIN_PX = 56
INVOICE_FONT_SIZE = 18
