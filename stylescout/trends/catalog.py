"""Curated fashion trends summarized from public editorial sources.

Each entry is a short curated summary (not a scraped article) attributed to
its primary source. ``sources_count`` is how many outlets reported the trend
and drives the deterministic confidence score computed by the trend store.
"""

from datetime import datetime

CURATED_TRENDS: list[dict] = [
    # Reported by four or more outlets
    {
        "trend_id": "trend_001",
        "trend_name": "Relaxed Tailoring",
        "description": "Oversized blazers and loose-fit trousers replace structured power suits. Comfort meets professionalism.",
        "source": "Vogue",
        "sources_count": 5,
        "category": "office",
        "season": "Any",
        "keywords": ["relaxed", "oversized", "blazer", "loose", "tailoring", "unstructured"],
        "created_at": datetime(2026, 6, 1),
        "expires_at": datetime(2027, 6, 1),
    },
    {
        "trend_id": "trend_002",
        "trend_name": "Quiet Luxury",
        "description": "Understated elegance with neutral tones, minimal logos, and premium fabrics. Less is more.",
        "source": "Elle",
        "sources_count": 6,
        "category": "any",
        "season": "Any",
        "keywords": ["quiet", "luxury", "minimal", "neutral", "understated", "elegant", "premium"],
        "created_at": datetime(2026, 5, 15),
        "expires_at": datetime(2027, 12, 1),
    },
    {
        "trend_id": "trend_003",
        "trend_name": "Dopamine Dressing",
        "description": "Bold, vibrant colors that spark joy. Hot pink, electric blue, and sunshine yellow dominate.",
        "source": "Vogue",
        "sources_count": 4,
        "category": "party",
        "season": "Summer",
        "keywords": ["dopamine", "bold", "vibrant", "colorful", "pink", "bright", "joy"],
        "created_at": datetime(2026, 6, 20),
        "expires_at": datetime(2027, 9, 1),
    },
    {
        "trend_id": "trend_004",
        "trend_name": "Coastal Grandmother",
        "description": "Breezy linen, soft knits, and nautical stripes. Effortless seaside elegance.",
        "source": "GQ",
        "sources_count": 4,
        "category": "casual",
        "season": "Summer",
        "keywords": ["coastal", "linen", "nautical", "stripe", "breezy", "beach", "seaside", "summer"],
        "created_at": datetime(2026, 4, 1),
        "expires_at": datetime(2027, 8, 1),
    },
    # Two or three outlets
    {
        "trend_id": "trend_005",
        "trend_name": "Athleisure Evolution",
        "description": "Sporty meets street. Technical fabrics in everyday silhouettes.",
        "source": "GQ",
        "sources_count": 3,
        "category": "casual",
        "season": "Any",
        "keywords": ["athleisure", "sporty", "jogger", "track", "hoodie", "sneaker", "athletic"],
        "created_at": datetime(2026, 3, 1),
        "expires_at": datetime(2027, 9, 1),
    },
    {
        "trend_id": "trend_006",
        "trend_name": "Sheer Confidence",
        "description": "Translucent fabrics and mesh details add edge to evening wear.",
        "source": "Elle",
        "sources_count": 3,
        "category": "party",
        "season": "Summer",
        "keywords": ["sheer", "mesh", "translucent", "evening", "bold", "daring"],
        "created_at": datetime(2026, 5, 1),
        "expires_at": datetime(2027, 6, 1),
    },
    {
        "trend_id": "trend_007",
        "trend_name": "Indie Sleaze Revival",
        "description": "Early 2010s party aesthetic returns. Skinny jeans, band tees, leather jackets.",
        "source": "Vogue",
        "sources_count": 2,
        "category": "party",
        "season": "Any",
        "keywords": ["indie", "sleaze", "skinny", "leather", "band", "rock", "edgy"],
        "created_at": datetime(2026, 6, 10),
        "expires_at": datetime(2027, 12, 1),
    },
    {
        "trend_id": "trend_008",
        "trend_name": "Corporate Core",
        "description": "Workwear as statement. Sharp shirts, pleated trousers, polished loafers.",
        "source": "GQ",
        "sources_count": 3,
        "category": "office",
        "season": "Any",
        "keywords": ["corporate", "office", "formal", "shirt", "trouser", "professional", "work"],
        "created_at": datetime(2026, 4, 15),
        "expires_at": datetime(2027, 10, 1),
    },
    # Single outlet
    {
        "trend_id": "trend_009",
        "trend_name": "Boho Maximalism",
        "description": "Layered prints, flowing silhouettes, and eclectic accessories.",
        "source": "Elle",
        "sources_count": 1,
        "category": "casual",
        "season": "Summer",
        "keywords": ["boho", "bohemian", "print", "flow", "maxi", "layered", "eclectic"],
        "created_at": datetime(2026, 3, 1),
        "expires_at": datetime(2027, 8, 1),
    },
    {
        "trend_id": "trend_010",
        "trend_name": "Elevated Ethnic",
        "description": "Traditional Indian silhouettes with modern cuts. Fusion kurtas and contemporary sarees.",
        "source": "Vogue India",
        "sources_count": 2,
        "category": "ethnic",
        "season": "Any",
        "keywords": ["ethnic", "kurta", "saree", "traditional", "fusion", "indian", "wedding"],
        "created_at": datetime(2026, 5, 20),
        "expires_at": datetime(2027, 11, 1),
    },
    {
        "trend_id": "trend_011",
        "trend_name": "Minimalist Monochrome",
        "description": "All-black or all-white outfits. Clean lines, zero embellishment.",
        "source": "GQ",
        "sources_count": 2,
        "category": "any",
        "season": "Any",
        "keywords": ["minimalist", "monochrome", "black", "white", "clean", "simple"],
        "created_at": datetime(2026, 6, 5),
        "expires_at": datetime(2027, 12, 1),
    },
    {
        "trend_id": "trend_012",
        "trend_name": "Cottagecore Romance",
        "description": "Pastoral prints, puff sleeves, and prairie dresses. Feminine and nostalgic.",
        "source": "Elle",
        "sources_count": 2,
        "category": "casual",
        "season": "Spring",
        "keywords": ["cottage", "prairie", "puff", "floral", "romantic", "feminine", "dress"],
        "created_at": datetime(2026, 8, 15),
        "expires_at": datetime(2027, 5, 1),
    },
]
