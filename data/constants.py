#!/usr/bin/env python3
"""
Vietnam hydropower reservoir constants
"""

UNKNOWN_BASIN = "UNKNOWN"

# Mapping tên hồ -> vùng lưu vực
RESERVOIR_BASINS = {
    # Miền Bắc - HONG basin
    "Tuyên Quang": "HONG",
    "Lai Châu": "HONG",
    "Bản Chát": "HONG",
    "Sơn La": "HONG",
    "Hòa Bình": "HONG",
    "Thác Bà": "HONG",
    "Huội Quảng": "HONG",
    "Nậm Chiến": "HONG",
    # Miền Trung - CENTRAL basin
    "A Vương": "CENTRAL",
    "Sông Tranh 2": "CENTRAL",
    "Đắk Mi 4": "CENTRAL",
    "Sông Bung 4": "CENTRAL",
    "Bình Điền": "CENTRAL",
    "Hương Điền": "CENTRAL",
    "Rào Quán": "CENTRAL",
    "Sông Ba Hạ": "CENTRAL",
    "Krông H'năng": "CENTRAL",
    "Sê San 4": "CENTRAL",
    "Sê San 4A": "CENTRAL",
    "Ialy": "CENTRAL",
    "Plei Krông": "CENTRAL",
    "Kanak": "CENTRAL",
    "Đại Ninh": "CENTRAL",
    "Đồng Nai 3": "CENTRAL",
    "Đồng Nai 4": "CENTRAL",
    # Miền Nam - MEKONG/DONGNAI
    "Trị An": "DONGNAI",
    "Thác Mơ": "DONGNAI",
    "Cần Đơn": "DONGNAI",
    "Srok Phu Miêng": "DONGNAI",
    "Buôn Kuốp": "MEKONG",
    "Buôn Tua Srah": "MEKONG",
    "Srêpốk 3": "MEKONG",
    "Srêpốk 4": "MEKONG",
    "Đrây H'linh": "MEKONG",
}

# Reservoir is "high water" at or above this % of normal level
HIGH_WATER_PERCENT = 90
