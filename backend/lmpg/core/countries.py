"""Supported countries for church contact numbers during onboarding."""

COUNTRY_CONFIGS: dict[str, dict] = {
    "US": {
        "name": "United States",
        "calling_code": "1",
        "formats": ["(555) 123-4567", "555-123-4567", "5551234567"],
        "description": "Enter as: (555) 123-4567 or 555-123-4567",
    },
    "AU": {
        "name": "Australia",
        "calling_code": "61",
        "formats": ["0400 000 000", "04 0000 0000", "0400000000"],
        "description": "Enter as: 0400 000 000 or 04 0000 0000",
    },
    "GB": {
        "name": "United Kingdom",
        "calling_code": "44",
        "formats": ["07700 900123", "077 0090 0123", "07700900123"],
        "description": "Enter as: 07700 900123 or 077 0090 0123",
    },
    "CA": {
        "name": "Canada",
        "calling_code": "1",
        "formats": ["(555) 123-4567", "555-123-4567", "5551234567"],
        "description": "Enter as: (555) 123-4567 or 555-123-4567",
    },
    "NZ": {
        "name": "New Zealand",
        "calling_code": "64",
        "formats": ["021 123 4567", "02112345678"],
        "description": "Enter as: 021 123 4567 or 021-123-4567",
    },
    "ZA": {
        "name": "South Africa",
        "calling_code": "27",
        "formats": ["082 123 4567", "0821234567"],
        "description": "Enter as: 082 123 4567 or 082-123-4567",
    },
    "IN": {
        "name": "India",
        "calling_code": "91",
        "formats": ["98765 43210", "+91 98765 43210"],
        "description": "Enter as: 98765 43210 or +91 98765 43210",
    },
    "SG": {
        "name": "Singapore",
        "calling_code": "65",
        "formats": ["9123 4567", "+65 9123 4567"],
        "description": "Enter as: 9123 4567 or +65 9123 4567",
    },
    "DE": {
        "name": "Germany",
        "calling_code": "49",
        "formats": ["0170 1234567", "+49 170 1234567"],
        "description": "Enter as: 0170 1234567 or +49 170 1234567",
    },
    "FR": {
        "name": "France",
        "calling_code": "33",
        "formats": ["06 12 34 56 78", "+33 6 12 34 56 78"],
        "description": "Enter as: 06 12 34 56 78 or +33 6 12 34 56 78",
    },
}


def supported_countries() -> list[dict]:
    return [
        {
            "code": code,
            "name": cfg["name"],
            "calling_code": f"+{cfg['calling_code']}",
            "description": cfg["description"],
            "formats": cfg["formats"],
        }
        for code, cfg in COUNTRY_CONFIGS.items()
    ]


def supports_mobile_numbers(country_code: str) -> bool:
    return country_code.upper() in COUNTRY_CONFIGS
