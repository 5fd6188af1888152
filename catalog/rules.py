"""
Default classification rule tables.

These are the brand and category tables the storefront cleanup scripts
converged on. They seed ClassificationRuleRecord (see the
seed_classification_rules command) and are used directly when the database
holds no active rules for a label type.

Each entry is (target label name, keywords). Order is significant: the first
matching entry wins.
"""

DEFAULT_BRAND_RULES = [
    ("Standard Enzyme", ["Standard Enzyme", "SE "]),
    ("Newton Labs", ["Newton Labs", "Newton Homeopathics"]),
    ("Terry Naturally", ["Terry Naturally", "Terry Nat"]),
    ("Dr. Tony", ["Dr. Tony", "Dr Tonys"]),
    ("Doctor's Blend", ["Doctor's Blend", "Doctors Blend", "Doctor Blend"]),
    ("Regalabs", ["Regalabs", "Regal Labs"]),
    ("Now Foods", ["Now Foods", "Now C-1000", "Now Liquid", "Now Glutathione"]),
    ("Nature's Sunshine", ["Nature's Sunshine", "Ns ", "Natures Sunshine"]),
    ("Nature's Plus", ["Nature's Plus", "Natures Plus", "Natures P "]),
    ("Nature's Balance", ["Nature's Balance", "Natures Balance"]),
    ("Life's Fortune", ["Life's Fortune", "Life Fortune"]),
    ("Life Extension", ["Life Extension", "Life Ext ", "Life Ext"]),
    ("Global Healing", ["Global Healing"]),
    ("Edom Labs", ["Edom Labs", "Edom Chiro"]),
    ("Flexcin", ["Flexcin"]),
    ("BioNeurix", ["BioNeurix", "Bioneurix"]),
    ("AC Grace", ["AC Grace", "A C Grace", "C Grace"]),
    ("Purple Tiger", ["Purple Tiger"]),
    ("Skinny Magic", ["Skinny Magic"]),
    ("HI-Tech", ["HI-Tech", "Hi Tech", "HI Tech Pharmaceutical"]),
    ("Unicity", ["Unicity"]),
    ("Vista Life", ["Vista Life"]),
    ("Host Defence", ["Host Defence", "Host Defense"]),
    ("North American Herb & Spice", ["North American", "Namerican", "THRES. N."]),
    ("Perrin's Naturals", ["Perrin's Naturals", "Perrins", "Perrin's"]),
    ("Our Father's Healing Herbs", ["Our Father's Healing Herbs", "Our Fathers"]),
    ("Carlson", ["Carlson"]),
    ("Enzymedica", ["Enzymedica"]),
    ("Gold Star", ["Gold Star"]),
    ("Hippie Jacks", ["Hippie Jacks", "Hippie Jack's"]),
    ("Irwin", ["Irwin"]),
    ("Life Flo", ["Life Flo"]),
    ("MD Science", ["MD Science", "Md Science", "MD Swiss"]),
    ("Natural Balance", ["Natural Balance"]),
    ("Oxylife", ["Oxylife", "Oxy Life"]),
    ("Buried Treasure", ["Buried Treasure"]),
    ("Hemp Bombs", ["Hemp Bombs"]),
    ("Herbs For Life", ["Herbs For Life", "Herbs Life"]),
]

DEFAULT_CATEGORY_RULES = [
    ("Blood Sugar", ["blood sugar", "glucose", "glycemic"]),
    ("Blood Pressure", ["blood pressure", "pressurex", "hypertension"]),
    ("CBD Shop", ["cbd", "hemp"]),
    ("Pet Supplements", ["pet", "dog", "cat", "canine", "feline"]),
    ("Homeopathic", ["homeopathic", "homeopathy", "arnica", "belladonna", "nux vomica"]),
    ("Topical Products", ["cream", "ointment", "gel", "lotion", "topical", "rub"]),
    ("Probiotics", ["probiotic", "lactobacillus", "bifidobacterium", "acidophilus"]),
    ("Enzymes", ["enzyme", "protease", "amylase", "lipase", "bromelain", "papain", "lactase"]),
    ("Amino Acids", ["amino acid", "l-arginine", "l-lysine", "l-glutamine", "taurine", "carnitine", "tyrosine"]),
    ("Fat Burners", ["fat burner", "carb blocker", "weight", "slim", "metabolism"]),
    ("Bodybuilding Pre-Workout", ["pre-workout", "creatine", "whey", "protein"]),
    ("Joint Pain", ["joint", "glucosamine", "chondroitin", "msm", "arthritis", "flexcin"]),
    ("Sleep Health", ["sleep", "melatonin", "valerian", "insomnia"]),
    ("Mood Support", ["mood", "stress", "anxiety", "calm"]),
    ("Vision Health Support", ["eye", "vision", "lutein", "zeaxanthin", "bilberry"]),
    ("Immune", ["immune", "immunity", "elderberry", "echinacea"]),
    ("Digestion", ["digestive", "digestion", "indigestion", "gut", "fiber", "psyllium"]),
    ("Men Products", ["men", "male", "prostate", "testosterone", "saw palmetto"]),
    ("Women Products", ["women", "female", "menopause", "menstrual", "pms"]),
    ("Antioxidants", ["antioxidant", "coq10", "alpha lipoic", "resveratrol", "quercetin"]),
    ("Minerals", ["mineral", "calcium", "magnesium", "zinc", "iron", "selenium", "potassium"]),
    ("Vitamins", ["vitamin", "multivitamin", "b-complex", "b12", "d3", "biotin", "folate"]),
    ("Herbs & Botanicals", ["herb", "botanical", "ginkgo", "ginseng", "turmeric", "milk thistle", "ashwagandha"]),
    ("Liquid Supplements", ["liquid", "drops", "tincture", "elixir"]),
]
