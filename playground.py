from testimony_analyzer.logging_setup import configure_logging
from testimony_analyzer.rules import load_rule_set
from testimony_analyzer.session import AnalysisSession

csv_path = "data/raw/your_file.csv"
rules_path = "testimony_analyzer/config/default_rules.json"

configure_logging("INFO")

# --- pipeline ---
session = AnalysisSession(load_rule_set(rules_path))
session.load_path(csv_path)

# --- analytics ---
print("\n--- MONTHS ---")
print(session.available_months)

analysis = session.analysis
if analysis is not None:
    print(f"\n--- CATEGORIES ({analysis.total} testimonies) ---")
    for category, count in analysis.categorization.items():
        print(f"{category:<35} {count:>5} ({analysis.share(category)}%)")

    print(f"\n--- TOP VALUES: {session.preview_column} ---")
    for value, count in analysis.distribution:
        print(f"{count:>5}  {value}")

print("\n--- FIRST ROWS ---")
print(session.table_preview(10)[["Category", "Matched_Keywords", "Month_Year"]])

# --- export ---
# session.category_filter = "Financial Miracles"
# with open(session.export_filename(), "w", encoding="utf-8") as f:
#     f.write(session.export_text())
