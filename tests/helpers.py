from datetime import date

ORG = "shop@example.com"
OTHER_ORG = "other@example.com"
TODAY = date(2024, 6, 15)
