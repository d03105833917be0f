import pytest

from offgrid.schemas.design import Component, DesignSnapshot, Wire, WirePolarity


@pytest.fixture
def clean_design() -> DesignSnapshot:
    """12 V battery, positive and negative bus bars, one 120 W DC load.

    Correctly wired and sized; validates with no issues at all.
    """
    return DesignSnapshot(
        system_voltage=12,
        components=[
            Component(
                id="bat", type="battery", name="House Bank", x=100, y=600,
                properties={"voltage": 12, "capacity": 200, "batteryType": "LiFePO4"},
            ),
            Component(id="bus", type="busbar-positive", name="Positive Bus", x=400, y=600),
            Component(id="neg", type="busbar-negative", name="Negative Bus", x=400, y=900),
            Component(
                id="load", type="dc-load", name="Fridge", x=800, y=600,
                properties={"watts": 120, "voltage": 12},
            ),
        ],
        wires=[
            Wire(id="w1", from_component_id="bat", from_terminal="positive",
                 to_component_id="bus", to_terminal="main",
                 polarity=WirePolarity.POSITIVE, gauge="4 AWG", length=5),
            Wire(id="w2", from_component_id="bus", from_terminal="pos-1",
                 to_component_id="load", to_terminal="positive",
                 polarity=WirePolarity.POSITIVE, gauge="10 AWG", length=10),
            Wire(id="w3", from_component_id="load", from_terminal="negative",
                 to_component_id="neg", to_terminal="neg-1",
                 polarity=WirePolarity.NEGATIVE, gauge="10 AWG", length=10),
            Wire(id="w4", from_component_id="neg", from_terminal="main",
                 to_component_id="bat", to_terminal="negative",
                 polarity=WirePolarity.NEGATIVE, gauge="4 AWG", length=5),
        ],
    )
