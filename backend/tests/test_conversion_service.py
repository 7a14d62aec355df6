import unittest

from omnimarket.models import UnitConversion
from omnimarket.services import conversion_service
from omnimarket.services.conversion_service import (
    add_conversion,
    describe_for_edit,
    edit_conversion,
    remove_conversion,
    resolve_conversion,
    to_base_quantity,
)
from omnimarket.validation import (
    DuplicateUnitNameError,
    ReferenceNotFoundError,
    UnitNotFoundError,
    ValidationError,
)


RENCENG = UnitConversion(name="Renceng", quantity=10, price=14500)
KARTON = UnitConversion(name="Karton", quantity=120, price=170000)


class ResolveConversionTests(unittest.TestCase):
    def resolve(self, **overrides):
        kwargs = {
            "name": "Slop",
            "reference_unit": "Sachet",
            "multiplier": 5,
            "price": 7000,
            "base_unit": "Sachet",
            "conversions": [RENCENG, KARTON],
        }
        kwargs.update(overrides)
        return resolve_conversion(**kwargs)

    def test_relative_to_base_unit_uses_multiplier(self):
        conv = self.resolve()
        self.assertEqual(conv, UnitConversion(name="Slop", quantity=5, price=7000))

    def test_relative_to_existing_unit_is_collapsed_to_base_units(self):
        conv = self.resolve(name="Bal", reference_unit="Renceng", multiplier=12, price=160000)
        self.assertEqual(conv.quantity, 120)

    def test_chain_of_three_levels(self):
        # 1 Pak = 10 Pcs, 1 Dus = 10 Pak, 1 Peti = 4 Dus
        convs = add_conversion([], base_unit="Pcs", name="Pak", reference_unit="Pcs", multiplier=10, price=9000)
        convs = add_conversion(convs, base_unit="Pcs", name="Dus", reference_unit="Pak", multiplier=10, price=85000)
        convs = add_conversion(convs, base_unit="Pcs", name="Peti", reference_unit="Dus", multiplier=4, price=330000)
        self.assertEqual([c.quantity for c in convs], [10, 100, 400])

    def test_fractional_multiplier_is_kept(self):
        conv = self.resolve(name="Setengah Renceng", reference_unit="Renceng", multiplier=0.5, price=7500)
        self.assertEqual(conv.quantity, 5)
        self.assertIsInstance(conv.quantity, int)

    def test_unknown_reference_is_rejected(self):
        with self.assertRaises(ReferenceNotFoundError):
            self.resolve(reference_unit="Pallet")

    def test_reference_match_is_exact(self):
        with self.assertRaises(ReferenceNotFoundError):
            self.resolve(reference_unit="renceng")

    def test_non_positive_multiplier_or_price_rejected(self):
        for overrides in ({"multiplier": 0}, {"multiplier": -2}, {"price": 0}, {"price": -1}):
            with self.subTest(**overrides):
                with self.assertRaises(ValidationError):
                    self.resolve(**overrides)

    def test_blank_name_rejected(self):
        with self.assertRaises(ValidationError):
            self.resolve(name="   ")

    def test_name_collisions_are_case_insensitive(self):
        with self.assertRaises(DuplicateUnitNameError):
            self.resolve(name="karton")
        with self.assertRaises(DuplicateUnitNameError):
            self.resolve(name="SACHET")

    def test_editing_index_may_keep_its_own_name(self):
        conv = self.resolve(name="Renceng", multiplier=12, price=17000, editing_index=0)
        self.assertEqual(conv.quantity, 12)

    def test_edited_unit_cannot_reference_itself(self):
        with self.assertRaises(ReferenceNotFoundError):
            edit_conversion(
                [RENCENG, KARTON], 0,
                base_unit="Sachet", name="Renceng", reference_unit="Renceng", multiplier=2, price=29000,
            )

    def test_edited_unit_may_reference_another_unit(self):
        updated = edit_conversion(
            [RENCENG, KARTON], 1,
            base_unit="Sachet", name="Karton", reference_unit="Renceng", multiplier=10, price=140000,
        )
        self.assertEqual(updated[1].quantity, 100)


class ConversionListTests(unittest.TestCase):
    def test_add_appends_without_mutating_input(self):
        original = [RENCENG]
        updated = add_conversion(original, base_unit="Sachet", name="Karton", reference_unit="Renceng", multiplier=12, price=170000)
        self.assertEqual(len(original), 1)
        self.assertEqual(updated[-1].quantity, 120)

    def test_edit_replaces_in_place(self):
        updated = edit_conversion(
            [RENCENG, KARTON], 0,
            base_unit="Sachet", name="Renceng", reference_unit="Sachet", multiplier=12, price=17000,
        )
        self.assertEqual([c.name for c in updated], ["Renceng", "Karton"])
        self.assertEqual(updated[0].quantity, 12)
        # Dependents are not re-resolved
        self.assertEqual(updated[1].quantity, 120)

    def test_edit_cannot_take_another_units_name(self):
        with self.assertRaises(DuplicateUnitNameError):
            edit_conversion(
                [RENCENG, KARTON], 0,
                base_unit="Sachet", name="Karton", reference_unit="Sachet", multiplier=12, price=17000,
            )

    def test_remove_by_index(self):
        self.assertEqual(remove_conversion([RENCENG, KARTON], 0), [KARTON])
        with self.assertRaises(ValidationError):
            remove_conversion([RENCENG], 3)

    def test_describe_for_edit_reopens_relative_to_base(self):
        self.assertEqual(
            describe_for_edit(KARTON, "Sachet"),
            {"name": "Karton", "reference_unit": "Sachet", "multiplier": 120, "price": 170000},
        )

    def test_reference_choices(self):
        self.assertEqual(
            conversion_service.reference_choices("Sachet", [RENCENG, KARTON]),
            ["Sachet", "Renceng", "Karton"],
        )

    def test_to_base_quantity(self):
        self.assertEqual(to_base_quantity(base_unit="Sachet", conversions=[KARTON], unit="Sachet", qty=3), 3)
        self.assertEqual(to_base_quantity(base_unit="Sachet", conversions=[KARTON], unit="Karton", qty=2), 240)
        with self.assertRaises(UnitNotFoundError):
            to_base_quantity(base_unit="Sachet", conversions=[KARTON], unit="Pallet", qty=1)


if __name__ == "__main__":
    unittest.main()
