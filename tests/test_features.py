import unittest

from reposcope.domain.features import MAX_FEATURES, extract_features


class TestExtractFeatures(unittest.TestCase):
    def test_no_readme(self) -> None:
        self.assertEqual(extract_features(None), [])
        self.assertEqual(extract_features(""), [])

    def test_no_feature_section(self) -> None:
        readme = "# Project\n\n- not a feature\n\n## Install\n\n1. pip install it\n"

        self.assertEqual(extract_features(readme), [])

    def test_bullets_and_numbers_inside_section(self) -> None:
        readme = "\n".join([
            "# Project",
            "- ignored bullet",
            "## Key Features",
            "- Fast startup  ",
            "* Plugin system",
            "+ Dark mode",
            "1. Offline support",
            "   - Nested item",
            "Plain paragraph",
            "## Installation",
            "- pip install project",
        ])

        self.assertEqual(
            extract_features(readme),
            ["Fast startup", "Plugin system", "Dark mode", "Offline support", "Nested item"],
        )

    def test_bold_marker_opens_section(self) -> None:
        readme = "**What it does**\n- Tracks stars\n- Sends digests\n"

        self.assertEqual(extract_features(readme), ["Tracks stars", "Sends digests"])

    def test_heading_with_indicator_keeps_section_open(self) -> None:
        readme = "## Features\n- One\n### More capabilities\n- Two\n## License\n- MIT\n"

        self.assertEqual(extract_features(readme), ["One", "Two"])

    def test_capped_at_ten(self) -> None:
        bullets = [f"- Feature {i}" for i in range(25)]
        readme = "## Features\n" + "\n".join(bullets)

        features = extract_features(readme)

        self.assertEqual(len(features), MAX_FEATURES)
        self.assertEqual(features[0], "Feature 0")
        self.assertEqual(features[-1], "Feature 9")
