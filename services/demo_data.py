"""Demo catalog seeded into an empty backend on first load."""
from services.entities import Product, Variation

DEMO_CATEGORIES = [
    "Raw Material", "Chairs", "Tables", "Wardrobes",
    "Office Furniture", "Home Utility", "Home Furniture",
]


def _image(text):
    return f"https://placehold.co/400x400/e2e8f0/1e293b?text={text}"


DEMO_PRODUCTS = [
    Product("p1", "SS Round Pipe 202", "Raw Material", _image("SS+Pipe"), 120, 180),
    Product("p2", "SS Square Pipe 304", "Raw Material", _image("Square+Pipe"), 250, 320),
    Product("p3", "Executive Office Chair", "Chairs", _image("Office+Chair"), 2500, 4500),
    Product("p4", "Visitor Staff Chair", "Chairs", _image("Visitor+Chair"), 1200, 2200),
    Product("p5", "Steel Almirah (Triveni)", "Wardrobes", _image("Almirah"), 6000, 9500),
    Product("p6", "Folding Dining Table", "Tables", _image("Folding+Table"), 1500, 2400),
    Product("p7", "SS 3-Seater Bench", "Office Furniture", _image("Waiting+Bench"), 3500, 5800),
    Product("p8", "Center Table (Fancy)", "Tables", _image("Center+Table"), 2800, 4500),
    Product("p9", "Shoe Rack", "Home Utility", _image("Shoe+Rack"), 800, 1500),
    Product("p10", "Queen Size SS Bed", "Home Furniture", _image("SS+Bed"), 5000, 8500),
]

# (id, product_id, name, stock, purchase_price, selling_price, color)
_VARIATION_ROWS = [
    ("v1", "p1", "19mm (3/4 inch)", 500, 120, 180, "#C0C0C0"),
    ("v2", "p1", "25mm (1 inch)", 300, 180, 250, "#C0C0C0"),
    ("v3", "p2", "1x1 inch", 200, 250, 320, "#A9A9A9"),
    ("v4", "p2", "1.5x1.5 inch", 150, 380, 480, "#A9A9A9"),
    ("v5", "p3", "High Back (Black)", 15, 2500, 4500, "#000000"),
    ("v6", "p3", "High Back (Brown)", 8, 2500, 4500, "#8B4513"),
    ("v7", "p4", "Mesh Back Standard", 40, 1200, 2200, "#000000"),
    ("v8", "p5", "6x3 ft Mirror Door", 5, 6000, 9500, "#708090"),
    ("v9", "p5", "6x4 ft Full Safe", 3, 8000, 12500, "#8B4513"),
    ("v10", "p6", "4x2 ft Plywood Top", 20, 1500, 2400, "#DEB887"),
    ("v11", "p6", "4x2 ft SS Top", 12, 2200, 3500, "#C0C0C0"),
    ("v12", "p7", "Perforated Steel", 10, 3500, 5800, "#C0C0C0"),
    ("v13", "p7", "Cushion Seat", 4, 4500, 7200, "#000080"),
    ("v14", "p8", "Glass Top Gold", 8, 2800, 4500, "#FFD700"),
    ("v15", "p9", "4 Layer Steel", 25, 800, 1500, "#C0C0C0"),
    ("v16", "p9", "5 Layer Steel", 15, 1000, 1800, "#C0C0C0"),
    ("v17", "p10", "5x6 ft Pipe Frame", 2, 5000, 8500, "#C0C0C0"),
    ("v18", "p10", "6x6 ft Heavy Duty", 2, 7000, 12000, "#C0C0C0"),
]

DEMO_VARIATIONS = [
    Variation(vid, pid, name, stock=stock, purchase_price=pp, selling_price=sp, color=color)
    for vid, pid, name, stock, pp, sp, color in _VARIATION_ROWS
]
