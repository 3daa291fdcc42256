"""
Constants
Centralised storage for telemetry labels, severity colours and onboarding catalogs.
"""
ARROW = "→"

# Labels the Android client writes when it appends telemetry to a description
TELEMETRY_LABELS = (
    "Device:",
    "Android:",
    "Screen:",
    "Battery:",
    "Network:",
    "Duration:",
    "Coordinates:",
    "Accuracy:",
    "Address:",
)
TELEMETRY_ONLY_THRESHOLD = 5

SEVERITIES = ("critical", "high", "medium", "low")
SEVERITY_COLORS = {
    "critical": "#FF3B5C",
    "high": "#F5A623",
    "medium": "#4F8EF7",
    "low": "#34C759",
}

DEVICE_TIERS = ("low", "mid", "high")

# Create-test form choices; first entry is the default
TEST_PRIORITIES = ("normal", "low", "high")
TARGET_DEVICES = ("all", "budget", "midrange", "flagship")

INDUSTRIES = [
    "Fintech", "E-commerce", "EdTech", "HealthTech", "Social Media",
    "Gaming", "SaaS / B2B", "Logistics", "Food & Delivery", "Travel",
    "Media & Entertainment", "Government / GovTech", "Other",
]

COMPANY_SIZES = ["Just me", "2-10", "11-50", "51-200", "200+"]

ROLES = [
    "Founder / CEO", "CTO / Tech Lead", "QA Lead / Manager",
    "Developer", "Product Manager", "Other",
]
