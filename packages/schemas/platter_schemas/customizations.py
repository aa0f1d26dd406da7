"""Customization schemas - choice groups on menu items and selected options."""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

# =============================================================================
# Menu Templates
# =============================================================================


class CustomizationKind(str, Enum):
    """How many options a customization group accepts."""

    SINGLE = "single"
    MULTI = "multi"


class CustomizationOption(BaseModel):
    """A single option within a customization group."""

    name: str = Field(min_length=1, max_length=200)
    price: Decimal = Field(default=Decimal("0.00"), description="Price delta")


class CustomizationGroup(BaseModel):
    """
    A named choice set declared on a menu item (e.g., "Size", "Toppings").

    This is the template a customer picks from, not a selection.
    """

    name: str
    kind: CustomizationKind = CustomizationKind.SINGLE
    required: bool = False
    options: list[CustomizationOption] = Field(default_factory=list)

    def get_option(self, name: str) -> CustomizationOption | None:
        """Look up an option by name."""
        for option in self.options:
            if option.name == name:
                return option
        return None


# =============================================================================
# Selections
# =============================================================================


class SingleSelection(BaseModel):
    """Selected option for a single-select group."""

    kind: Literal["single"] = "single"
    option: CustomizationOption

    @property
    def price(self) -> Decimal:
        return self.option.price

    def option_names(self) -> tuple[str, ...]:
        return (self.option.name,)


class MultiSelection(BaseModel):
    """Selected options for a multi-select group."""

    kind: Literal["multi"] = "multi"
    options: list[CustomizationOption] = Field(default_factory=list)

    @property
    def price(self) -> Decimal:
        return sum((option.price for option in self.options), Decimal("0"))

    def option_names(self) -> tuple[str, ...]:
        # Selection order is irrelevant for equality
        return tuple(sorted(option.name for option in self.options))


Selection = Annotated[SingleSelection | MultiSelection, Field(discriminator="kind")]

# Group name -> selection
Customizations = dict[str, Selection]

CustomizationKey = tuple[tuple[str, str, tuple[str, ...]], ...]

_customizations_adapter: TypeAdapter[Customizations] = TypeAdapter(Customizations)


def parse_customizations(raw: object) -> Customizations:
    """
    Validate a raw customization mapping.

    Raises:
        pydantic.ValidationError: If the payload is not a valid mapping.
    """
    if raw is None:
        return {}
    return _customizations_adapter.validate_python(raw)


def dump_customizations(customizations: Customizations) -> dict[str, object]:
    """Serialize a customization mapping to JSON-compatible data."""
    return _customizations_adapter.dump_python(customizations, mode="json")


def customization_price(customizations: Customizations) -> Decimal:
    """Sum of the price deltas of every selected option."""
    return sum(
        (selection.price for selection in customizations.values()), Decimal("0")
    )


def customization_key(customizations: Customizations) -> CustomizationKey:
    """
    Canonical, hashable form of a customization mapping.

    Two mappings with the same key are the same choice: groups are compared
    by name, single-selects by option name, multi-selects by the set of
    option names. Empty multi-selects are treated as absent.
    """
    return tuple(
        sorted(
            (group, selection.kind, selection.option_names())
            for group, selection in customizations.items()
            if selection.option_names()
        )
    )


def select(group: CustomizationGroup, *names: str) -> SingleSelection | MultiSelection:
    """
    Build a selection for a group from option names.

    Example:
        size = CustomizationGroup(name="Size", options=[...])
        customizations = {"Size": select(size, "Medium")}

    Raises:
        ValueError: If an option is unknown or a single-select gets
            more than one name.
    """
    options: list[CustomizationOption] = []
    for name in names:
        option = group.get_option(name)
        if option is None:
            raise ValueError(f"'{name}' is not an option of '{group.name}'")
        options.append(option)

    if group.kind == CustomizationKind.SINGLE:
        if len(options) != 1:
            raise ValueError(f"'{group.name}' requires exactly one selection")
        return SingleSelection(option=options[0])
    return MultiSelection(options=options)
