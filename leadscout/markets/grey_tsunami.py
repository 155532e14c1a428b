"""
Grey Tsunami industry taxonomy.

Business types that are typically owner-operated by retiring boomers, grouped
into tiered categories. Each category carries an acquisition score (1-10,
higher = better acquisition target) used for the sector tier bonus.
NAICS_MAPPINGS ties the business types to the NAICS codes the Census CBP
endpoint understands.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class GreyTsunamiCategory:
    tier: str
    category: str
    acquisition_score: int
    businesses: Tuple[str, ...]


GREY_TSUNAMI_CATEGORIES = [
    GreyTsunamiCategory('TIER 1', 'Essential Home Services', 10, (
        'HVAC Services', 'Plumbing Services', 'Electrical Services', 'Roofing & Siding',
        'Pest Control', 'Septic Tank Services', 'Foundation Repair', 'Mold Remediation',
        'Landscaping/Lawn Care', 'Janitorial Services',
    )),
    GreyTsunamiCategory('TIER 2', 'Property & Facility Services', 9, (
        'Building Maintenance', 'Waste Management', 'Dumpster Rental Services',
        'Commercial Construction', 'Senior Living Management', 'Student Housing Management',
    )),
    GreyTsunamiCategory('TIER 3', 'Home Improvement & Remodeling', 9, (
        'Home Remodeling', 'Whole House Remodeling', 'Room Additions', 'Flooring Installation',
        'Cabinet Installation', 'Concrete Services', 'Fence Installation & Repair',
        'Deck Building & Repair', 'Swimming Pool Construction', 'Insulation Services',
    )),
    GreyTsunamiCategory('TIER 4', 'Automotive & Transportation', 8, (
        'Auto Repair Shops', 'Transmission Repair', 'Brake Repair Specialists',
        'Oil Change/Quick Lube', 'Tire Shops', 'Auto Parts Store',
    )),
    GreyTsunamiCategory('TIER 5', 'Healthcare & Professional Practices', 8, (
        'Dental Practices', 'Veterinary Services', 'Home Healthcare Agencies',
        'Chiropractic Offices', 'Optometry Practices', 'Medical Labs', 'Pharmacy (Independent)',
    )),
    GreyTsunamiCategory('TIER 6', 'B2B Professional Services', 7, (
        'Accounting Firms', 'Bookkeeping Services', 'Payroll Services', 'IT Services/MSP',
        'Staffing Agencies', 'Security Services', 'Engineering Services',
        'Commercial Print Shops', 'Marketing Agencies',
    )),
    GreyTsunamiCategory('TIER 7', 'Boring But Profitable', 7, (
        'Self-Storage Facilities', 'Laundromats', 'Dry Cleaners', 'RV Parks/Campgrounds',
        'Moving & Storage',
    )),
    GreyTsunamiCategory('TIER 8', 'Specialty Retail & Services', 6, (
        'Funeral Homes', 'Appliance Repair', 'Florists', 'Uniform/Embroidery Services',
        'Liquor Stores',
    )),
    GreyTsunamiCategory('TIER 9', 'Manufacturing & Industrial', 6, (
        'Machine Shops', 'Metal Fabrication', 'Industrial Equipment Repair', 'Powder Coating',
        'Custom Metalwork',
    )),
    GreyTsunamiCategory('TIER 11', 'Personal & Pet Services', 5, (
        'Pet Grooming', 'Hair Salons', 'Daycare Centers', 'Driving Schools',
        'Tutoring Services', 'Senior Care Services',
    )),
    GreyTsunamiCategory('TIER 12', 'Food & Hospitality', 4, (
        'Established Restaurants', 'Catering Services', 'Bed and Breakfasts', 'Food Distribution',
    )),
    GreyTsunamiCategory('TIER 14', 'Specialized Cleaning & Restoration', 5, (
        'Medical Waste Disposal', 'Hazardous Waste Disposal',
    )),
    GreyTsunamiCategory('TIER 16', 'Distribution & Wholesale', 5, (
        'Building Materials Distribution', 'Electrical Supply Wholesale',
        'HVAC Parts Distribution', 'Plumbing Supply Distribution',
        'Industrial Supply Distribution', 'Janitorial Supply Distribution',
    )),
    GreyTsunamiCategory('TIER 17', 'Transportation & Logistics', 4, (
        'Trucking Companies (Local)', 'Courier Services', 'Freight Brokerage',
        'Medical Transport (Non-Emergency)', 'Charter Bus Services',
    )),
    GreyTsunamiCategory('TIER 18', 'Specialized Manufacturing', 4, (
        'Cabinet Making', 'Sign Manufacturing', 'Precast Concrete Manufacturing',
        'Custom Furniture Manufacturing',
    )),
    GreyTsunamiCategory('TIER 19', 'Marine & Recreational Services', 3, (
        'Marinas', 'Golf Courses', 'Bowling Alleys',
    )),
]


# (naics code, description, business types)
NAICS_MAPPINGS = [
    ('2361', 'Residential Building Construction', ('Room Additions', 'Whole House Remodeling', 'Home Remodeling')),
    ('2362', 'Nonresidential Building Construction', ('Commercial Construction', 'Building Maintenance')),
    ('2371', 'Utility System Construction', ('Septic Tank Services',)),
    ('2381', 'Foundation, Structure, and Building Exterior Contractors', ('Roofing & Siding', 'Foundation Repair')),
    ('2382', 'Building Equipment Contractors', ('HVAC Services', 'Plumbing Services', 'Electrical Services')),
    ('2383', 'Building Finishing Contractors', ('Insulation Services', 'Flooring Installation', 'Cabinet Installation')),
    ('2389', 'Other Specialty Trade Contractors', ('Concrete Services', 'Fence Installation & Repair', 'Deck Building & Repair', 'Swimming Pool Construction')),
    ('3212', 'Veneer, Plywood, and Engineered Wood Product Manufacturing', ('Cabinet Making',)),
    ('3219', 'Other Wood Product Manufacturing', ('Custom Furniture Manufacturing',)),
    ('3231', 'Printing and Related Support Activities', ('Commercial Print Shops',)),
    ('3273', 'Cement and Concrete Product Manufacturing', ('Precast Concrete Manufacturing',)),
    ('3323', 'Architectural and Structural Metals Manufacturing', ('Metal Fabrication', 'Custom Metalwork')),
    ('3328', 'Coating, Engraving, Heat Treating, and Allied Activities', ('Powder Coating',)),
    ('3399', 'Other Miscellaneous Manufacturing', ('Sign Manufacturing',)),
    ('4233', 'Lumber and Other Construction Materials Merchant Wholesalers', ('Building Materials Distribution',)),
    ('4236', 'Household Appliances and Electrical Merchant Wholesalers', ('Electrical Supply Wholesale', 'HVAC Parts Distribution')),
    ('4237', 'Hardware, Plumbing, and Heating Equipment Merchant Wholesalers', ('Plumbing Supply Distribution',)),
    ('4238', 'Machinery, Equipment, and Supplies Merchant Wholesalers', ('Industrial Supply Distribution',)),
    ('4244', 'Grocery and Related Product Merchant Wholesalers', ('Food Distribution',)),
    ('4246', 'Chemical and Allied Products Merchant Wholesalers', ('Janitorial Supply Distribution',)),
    ('4413', 'Automotive Parts, Accessories, and Tire Stores', ('Auto Parts Store', 'Tire Shops')),
    ('4453', 'Beer, Wine, and Liquor Stores', ('Liquor Stores',)),
    ('4461', 'Health and Personal Care Stores', ('Pharmacy (Independent)',)),
    ('4481', 'Clothing Stores', ('Uniform/Embroidery Services',)),
    ('4531', 'Florists', ('Florists',)),
    ('4841', 'General Freight Trucking', ('Trucking Companies (Local)',)),
    ('4854', 'School and Employee Bus Transportation', ('Charter Bus Services',)),
    ('4855', 'Charter Bus Industry', ('Charter Bus Services',)),
    ('4859', 'Other Transit and Ground Passenger Transportation', ('Medical Transport (Non-Emergency)',)),
    ('4885', 'Freight Transportation Arrangement', ('Freight Brokerage',)),
    ('4921', 'Couriers and Express Delivery Services', ('Courier Services',)),
    ('4931', 'Warehousing and Storage', ('Self-Storage Facilities', 'Moving & Storage')),
    ('5412', 'Accounting, Tax Preparation, Bookkeeping, and Payroll Services', ('Accounting Firms', 'Bookkeeping Services', 'Payroll Services')),
    ('5413', 'Architectural, Engineering, and Related Services', ('Engineering Services',)),
    ('5415', 'Computer Systems Design and Related Services', ('IT Services/MSP',)),
    ('5418', 'Advertising, Public Relations, and Related Services', ('Marketing Agencies',)),
    ('5419', 'Other Professional, Scientific, and Technical Services', ('Veterinary Services',)),
    ('5613', 'Employment Services', ('Staffing Agencies',)),
    ('5616', 'Investigation and Security Services', ('Security Services',)),
    ('5617', 'Services to Buildings and Dwellings', ('Pest Control', 'Janitorial Services', 'Landscaping/Lawn Care')),
    ('5621', 'Waste Collection', ('Waste Management', 'Dumpster Rental Services')),
    ('5622', 'Waste Treatment and Disposal', ('Medical Waste Disposal', 'Hazardous Waste Disposal')),
    ('5629', 'Remediation and Other Waste Management Services', ('Mold Remediation',)),
    ('6116', 'Other Schools and Instruction', ('Driving Schools', 'Tutoring Services')),
    ('6212', 'Offices of Dentists', ('Dental Practices',)),
    ('6213', 'Offices of Other Health Practitioners', ('Chiropractic Offices', 'Optometry Practices')),
    ('6215', 'Medical and Diagnostic Laboratories', ('Medical Labs',)),
    ('6216', 'Home Health Care Services', ('Home Healthcare Agencies',)),
    ('6231', 'Nursing Care Facilities', ('Senior Living Management',)),
    ('6241', 'Individual and Family Services', ('Senior Care Services',)),
    ('6244', 'Child Day Care Services', ('Daycare Centers',)),
    ('7139', 'Other Amusement and Recreation Industries', ('Golf Courses', 'Marinas', 'Bowling Alleys')),
    ('7211', 'Traveler Accommodation', ('Bed and Breakfasts',)),
    ('7212', 'RV Parks and Recreational Camps', ('RV Parks/Campgrounds',)),
    ('7213', 'Rooming and Boarding Houses', ('Student Housing Management',)),
    ('7223', 'Special Food Services', ('Catering Services',)),
    ('7225', 'Restaurants and Other Eating Places', ('Established Restaurants',)),
    ('8111', 'Automotive Repair and Maintenance', ('Auto Repair Shops', 'Transmission Repair', 'Oil Change/Quick Lube', 'Brake Repair Specialists')),
    ('8113', 'Commercial and Industrial Machinery Repair', ('Industrial Equipment Repair', 'Machine Shops')),
    ('8114', 'Personal and Household Goods Repair', ('Appliance Repair',)),
    ('8121', 'Personal Care Services', ('Hair Salons',)),
    ('8122', 'Death Care Services', ('Funeral Homes',)),
    ('8123', 'Drycleaning and Laundry Services', ('Dry Cleaners', 'Laundromats')),
    ('8129', 'Other Personal Services', ('Pet Grooming',)),
]


def tier_number(tier):
    """'TIER 7' -> 7; unknown tiers sort last."""
    try:
        return int(tier.replace('TIER', '').strip())
    except (AttributeError, ValueError):
        return 99


def category_for_business(business_type) -> Optional[GreyTsunamiCategory]:
    """Case-insensitive lookup of the category a business type belongs to."""
    wanted = business_type.lower()
    for category in GREY_TSUNAMI_CATEGORIES:
        if any(b.lower() == wanted for b in category.businesses):
            return category
    return None


def category_by_name(name) -> Optional[GreyTsunamiCategory]:
    for category in GREY_TSUNAMI_CATEGORIES:
        if category.category == name:
            return category
    return None


def naics_codes_for_business_type(business_type) -> List[str]:
    wanted = business_type.lower()
    return [code for code, _, types in NAICS_MAPPINGS
            if any(t.lower() == wanted for t in types)]


def business_types_for_naics(naics_code) -> List[str]:
    """Business types under a NAICS code; shorter codes match every code they prefix."""
    found = []
    for code, _, types in NAICS_MAPPINGS:
        if code.startswith(naics_code):
            for t in types:
                if t not in found:
                    found.append(t)
    return found


def naics_description(naics_code):
    for code, description, _ in NAICS_MAPPINGS:
        if code == naics_code:
            return description
    for code, description, _ in NAICS_MAPPINGS:
        if code.startswith(naics_code):
            return f'{description} (and related)'
    return 'Unknown NAICS code'


def identify_top_industries(business, allowed_tiers=None) -> List[str]:
    """
    Estimate a county's top Grey Tsunami business types from its average
    establishment size alone (no per-industry Census calls).

    Small average size favours service categories, 10-49 takes any category,
    50+ favours manufacturing/industrial. Two business types per category,
    best acquisition score first; falls back to the top three categories.
    """
    categories = GREY_TSUNAMI_CATEGORIES
    if allowed_tiers:
        categories = [c for c in categories if c.tier in allowed_tiers]
    categories = sorted(categories, key=lambda c: c.acquisition_score, reverse=True)

    size = business.avg_business_size
    industries = []
    for category in categories:
        name = category.category.lower()
        if size < 10:
            matches = 'service' in name
        elif size < 50:
            matches = True
        else:
            matches = 'manufacturing' in name or 'industrial' in name
        if matches:
            industries.extend(category.businesses[:2])
        if len(industries) >= 10:
            break

    if not industries:
        for category in categories[:3]:
            industries.extend(category.businesses[:2])

    return list(dict.fromkeys(industries))[:5]


def extract_top_industries(industry_data) -> List[str]:
    """Top 5 business types from real Census counts, lower tier first, then by count."""
    ranked = []
    for category_name, data in industry_data.industries.items():
        category = category_by_name(category_name)
        tier = category.tier if category else 'TIER 20'
        for estimate in data.business_types:
            if estimate.estimated_count > 0:
                ranked.append((tier_number(tier), -estimate.estimated_count, estimate.business_type))
    ranked.sort(key=lambda r: (r[0], r[1]))
    return [business_type for _, _, business_type in ranked[:5]]


def matches_tiers(industries, tiers) -> bool:
    """True when any of the business types belongs to one of the tiers."""
    for industry in industries:
        category = category_for_business(industry)
        if category and category.tier in tiers:
            return True
    return False
