"""Constants and paths for the alternatives directory."""

import os
from dotenv import load_dotenv

load_dotenv()

SERVICES_PATH = os.getenv("SERVICES_PATH", "./data/services.json")
FUZZY_THRESHOLD = float(os.getenv("FUZZY_THRESHOLD", "0.4"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
SUGGEST_EMAIL = os.getenv("SUGGEST_EMAIL", "suggestions@globalbalance.example")

# Maintenance probes
VALIDATOR_USER_AGENT = "GlobalBalanceEngine-Validator/1.0"
BROWSER_USER_AGENT = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                      "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36")
IMPORT_USER_AGENT = "GlobalBalanceEngine/1.0 (https://github.com/global-balance-engine)"
HEALTH_TIMEOUT = float(os.getenv("HEALTH_TIMEOUT", "5"))
TRUST_TIMEOUT = float(os.getenv("TRUST_TIMEOUT", "10"))
SLOW_TRUST_TIMEOUT = float(os.getenv("SLOW_TRUST_TIMEOUT", "15"))
HEALTH_DELAY = float(os.getenv("HEALTH_DELAY", "0.2"))
TRUST_DELAY = float(os.getenv("TRUST_DELAY", "0.5"))
GLOBAL_DELAY = float(os.getenv("GLOBAL_DELAY", "1.0"))

# Categories whose review-site check gets the longer timeout and a GET retry
SLOW_TRUST_CATEGORIES = ("Electric Vehicles",)

# Brand aliases: a query naming a well-known incumbent jumps straight to its
# category. Order matters for partial queries; keep aliases disjoint.
BRAND_ALIASES = {
    "Communication": ["whatsapp", "gmail", "outlook", "skype", "zoom", "slack",
                      "messenger", "imessage", "hotmail", "yahoo mail"],
    "Productivity & Tools": ["google docs", "google drive", "microsoft office",
                             "office 365", "notion", "dropbox", "evernote",
                             "trello", "adobe"],
    "Social": ["facebook", "instagram", "twitter", "threads", "snapchat",
               "linkedin", "reddit", "pinterest"],
    "Information & Browsers": ["google search", "chrome", "bing", "safari",
                               "wikipedia", "duckduckgo"],
    "Electric Vehicles": ["tesla", "rivian", "lucid motors", "cybertruck"],
    "Cloud Infrastructure": ["amazon web services", "azure", "google cloud",
                             "digitalocean", "heroku", "cloudflare"],
    "Entertainment": ["netflix", "youtube", "hulu", "disney", "prime video",
                      "apple music", "twitch"],
    "E-Commerce": ["ebay", "walmart", "etsy", "aliexpress", "shopify"],
}
