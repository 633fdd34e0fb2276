"""Test coverage for :py:module:`iso8601_duration.pydantic`"""
import json
import unittest

from pydantic import BaseModel, ValidationError

from iso8601_duration import Duration
from iso8601_duration.pydantic import ISODuration, duration_from_isoformat, duration_to_isoformat


class RetentionSettings(BaseModel):
    """Sample configuration model with duration fields"""

    retention: ISODuration
    grace_period: ISODuration = Duration.ZERO


invalid_inputs = [
    "",
    "P",
    "P1M2Y",
    "PT1.5S",
    5,
    None,
    ["P1D"],
]


class PydanticIntegration(unittest.TestCase):
    """Functional testing for the pydantic duration field type"""

    def test_validate_from_text(self) -> None:
        settings = RetentionSettings.model_validate({"retention": "P1Y2M", "grace_period": "PT12H"})
        self.assertEqual(Duration(years=1, months=2), settings.retention)
        self.assertEqual(Duration(hours=12), settings.grace_period)

    def test_validate_from_json(self) -> None:
        settings = RetentionSettings.model_validate_json('{"retention": "P3W"}')
        self.assertEqual(Duration.from_weeks(3), settings.retention)
        self.assertEqual(Duration.ZERO, settings.grace_period)

    def test_validate_from_instance(self) -> None:
        duration = Duration(days=4, minutes=30)
        self.assertIs(duration, RetentionSettings(retention=duration).retention)

    def test_validate_invalid(self) -> None:
        """Invalid inputs are reported as validation errors"""
        for invalid_input in invalid_inputs:
            with self.subTest(invalid_input=invalid_input):
                with self.assertRaises(ValidationError):
                    RetentionSettings.model_validate({"retention": invalid_input})

    def test_validation_error_reason(self) -> None:
        with self.assertRaises(ValidationError) as context:
            RetentionSettings.model_validate({"retention": "P1M2Y"})
        self.assertIn("unexpected character 'Y'", str(context.exception))

    def test_serialize_json(self) -> None:
        settings = RetentionSettings(retention=Duration(years=1, hours=2))
        self.assertEqual({"retention": "P1YT2H", "grace_period": "P0D"}, json.loads(settings.model_dump_json()))
        self.assertEqual("P1YT2H", settings.model_dump(mode="json")["retention"])

    def test_serialize_python(self) -> None:
        settings = RetentionSettings(retention=Duration.from_days(1))
        self.assertEqual(Duration.from_days(1), settings.model_dump()["retention"])

    def test_model_dump_roundtrip(self) -> None:
        """Dumped settings validate back to the same durations in both modes"""
        settings = RetentionSettings(retention=Duration(days=1), grace_period=Duration(hours=6, seconds=30))
        self.assertEqual(settings, RetentionSettings.model_validate(settings.model_dump()))
        self.assertEqual(settings, RetentionSettings.model_validate(settings.model_dump(mode="json")))
        self.assertEqual(settings, RetentionSettings.model_validate_json(settings.model_dump_json()))

    def test_json_schema(self) -> None:
        schema = RetentionSettings.model_json_schema()
        self.assertEqual("string", schema["properties"]["retention"]["type"])
        self.assertEqual("duration", schema["properties"]["retention"]["format"])

    def test_conversion_functions(self) -> None:
        self.assertEqual(Duration(days=1, seconds=5), duration_from_isoformat("P1DT5S"))
        self.assertEqual("P1DT5S", duration_to_isoformat(Duration(days=1, seconds=5)))
        with self.assertRaises(ValidationError):
            duration_from_isoformat("P1D5")
