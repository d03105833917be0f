"""Static device catalog.

Every device type the editor can place, with its named terminals, the
polarity class of each terminal, and the wiring guidance shown to users
and fed to the design generator. Footprints (width × height, px) are the
canvas sizes the layout checks use.
"""

from __future__ import annotations

from offgrid.schemas.device import (
    DeviceCategory,
    DeviceDefinition,
    PolarityClass,
    TerminalDefinition,
)

P = PolarityClass


def _t(
    terminal_id: str,
    polarity_class: PolarityClass,
    label: str,
    mandatory: bool = True,
    description: str | None = None,
) -> TerminalDefinition:
    return TerminalDefinition(
        id=terminal_id,
        polarity_class=polarity_class,
        label=label,
        mandatory=mandatory,
        description=description,
    )


def _inverter_terminals(with_ac_input: bool) -> tuple[TerminalDefinition, ...]:
    terminals = []
    if with_ac_input:
        terminals += [
            _t("ac-in-hot", P.AC_IN, "AC IN L", False, "Grid/Shore Line"),
            _t("ac-in-neutral", P.AC_IN, "AC IN N", False, "Grid/Shore Neutral"),
            _t("ac-in-ground", P.GROUND, "AC IN G", False, "Grid/Shore Ground"),
        ]
    terminals += [
        _t("ac-out-hot", P.AC_OUT, "AC OUT L", True, "Load Line"),
        _t("ac-out-neutral", P.AC_OUT, "AC OUT N", True, "Load Neutral"),
        _t("ac-out-ground", P.GROUND, "AC OUT G", True, "Load Ground"),
        _t("dc-positive", P.POSITIVE, "DC+", True, "Battery Positive"),
        _t("dc-negative", P.NEGATIVE, "DC-", True, "Battery Negative"),
        _t("chassis-ground", P.GROUND, "GND", with_ac_input, "Chassis Ground"),
    ]
    return tuple(terminals)


_DEFINITIONS: list[DeviceDefinition] = [
    DeviceDefinition(
        type="multiplus",
        name="MultiPlus Inverter/Charger",
        description=(
            "Combined inverter and charger. Converts DC from battery to AC for "
            "loads, and charges battery from AC input (grid/shore)."
        ),
        category=DeviceCategory.SOURCE,
        terminals=_inverter_terminals(with_ac_input=True),
        wiring_rules=(
            "DC Positive must be fused close to the battery.",
            "DC Negative should connect to the system side of the shunt if a "
            "battery monitor is used.",
            "AC Input requires a circuit breaker.",
            "AC Output should go to an AC distribution panel.",
        ),
        usage_notes=(
            "The heart of the system. Ensure DC cables are sized for the "
            "maximum inverter current."
        ),
        width=180,
        height=140,
    ),
    DeviceDefinition(
        type="inverter",
        name="Inverter",
        description="Converts battery DC to AC for household loads.",
        category=DeviceCategory.LOAD,
        terminals=_inverter_terminals(with_ac_input=False),
        wiring_rules=(
            "DC Positive must be fused close to the battery.",
            "AC Output should go to an AC distribution panel or directly to loads.",
        ),
        usage_notes="Size DC cables for the full inverter input current.",
        width=160,
        height=120,
    ),
    DeviceDefinition(
        type="phoenix-inverter",
        name="Phoenix Inverter",
        description="Pure sine wave inverter without a built-in charger.",
        category=DeviceCategory.LOAD,
        terminals=_inverter_terminals(with_ac_input=False),
        wiring_rules=(
            "DC Positive must be fused close to the battery.",
            "AC Output should go to an AC distribution panel.",
        ),
        usage_notes="Use a MultiPlus instead when shore charging is needed.",
        width=160,
        height=120,
    ),
    DeviceDefinition(
        type="mppt",
        name="MPPT Solar Charge Controller",
        description="Optimizes solar panel output to charge the battery bank.",
        category=DeviceCategory.SOURCE,
        terminals=(
            _t("pv-positive", P.PV_POSITIVE, "PV+", True, "Positive input from solar array"),
            _t("pv-negative", P.PV_NEGATIVE, "PV-", True, "Negative input from solar array"),
            _t("batt-positive", P.POSITIVE, "BATT+", True, "Positive output to battery/busbar (via fuse)"),
            _t("batt-negative", P.NEGATIVE, "BATT-", True, "Negative output to battery/busbar"),
        ),
        wiring_rules=(
            "Connect Battery side FIRST, then PV side.",
            "PV input voltage must never exceed controller max voltage.",
            "Battery positive requires a fuse.",
        ),
        usage_notes="Matches solar voltage to battery voltage. Essential for solar charging.",
        width=160,
        height=130,
    ),
    DeviceDefinition(
        type="blue-smart-charger",
        name="Blue Smart IP22 Charger",
        description="AC powered battery charger for shore or generator power.",
        category=DeviceCategory.SOURCE,
        terminals=(
            _t("ac-in-hot", P.AC_IN, "AC L", False, "Shore/Generator Line"),
            _t("ac-in-neutral", P.AC_IN, "AC N", False, "Shore/Generator Neutral"),
            _t("ac-in-ground", P.GROUND, "AC G", False, "Shore/Generator Ground"),
            _t("dc-positive", P.POSITIVE, "DC+", True, "Charge output positive"),
            _t("dc-negative", P.NEGATIVE, "DC-", True, "Charge output negative"),
        ),
        wiring_rules=(
            "DC output positive requires a fuse sized to the charger output.",
            "AC input should come from a breaker-protected circuit.",
        ),
        usage_notes="Charges the house bank whenever AC power is available.",
        width=140,
        height=110,
    ),
    DeviceDefinition(
        type="orion-dc-dc",
        name="Orion-Tr Smart DC-DC Charger",
        description="Charges the house battery from the vehicle alternator/starter battery.",
        category=DeviceCategory.SOURCE,
        terminals=(
            _t("input-positive", P.POSITIVE, "IN+", True, "From starter battery positive"),
            _t("input-negative", P.NEGATIVE, "IN-", True, "From starter battery negative"),
            _t("output-positive", P.POSITIVE, "OUT+", True, "To house battery/busbar positive"),
            _t("output-negative", P.NEGATIVE, "OUT-", True, "To house battery/busbar negative"),
        ),
        wiring_rules=(
            "Fuse both the input and the output positive cables.",
            "Input and output negatives share a common ground.",
        ),
        usage_notes="Protects the alternator while charging a lithium house bank.",
        width=140,
        height=110,
    ),
    DeviceDefinition(
        type="shore-power",
        name="Shore Power Inlet",
        description="AC inlet for campground or dock power.",
        category=DeviceCategory.SOURCE,
        terminals=(
            _t("hot", P.AC_OUT, "L", True, "Line/Hot"),
            _t("neutral", P.AC_OUT, "N", True, "Neutral"),
            _t("ground", P.GROUND, "G", True, "Ground"),
        ),
        wiring_rules=("Feed the inverter/charger AC input or an AC panel through a breaker.",),
        usage_notes="External AC source.",
        width=120,
        height=100,
    ),
    DeviceDefinition(
        type="cerbo",
        name="Cerbo GX",
        description="Communication center. Monitors and controls all connected Victron equipment.",
        category=DeviceCategory.CONTROL,
        terminals=(
            _t("power-positive", P.POSITIVE, "Power +", True, "DC Power supply (8-70V)"),
            _t("power-negative", P.NEGATIVE, "Power -", True, "DC Ground"),
            _t("ve-bus", P.DATA, "VE.Bus", False, "Connection to MultiPlus/Quattro"),
            _t("ve-direct", P.DATA, "VE.Direct", False, "Connection to MPPTs and BMV/Shunts"),
            _t("ve-can", P.DATA, "VE.Can", False, "Connection to NMEA2000 or other CAN devices"),
        ),
        wiring_rules=(
            "Requires a small inline fuse (1A) for power.",
            "Connects to other devices via data cables (RJ45, VE.Direct).",
        ),
        usage_notes="The brain of the system. Enables remote monitoring via VRM.",
        width=180,
        height=120,
    ),
    DeviceDefinition(
        type="bmv",
        name="BMV Battery Monitor",
        description="Battery monitor with display.",
        category=DeviceCategory.CONTROL,
        terminals=(
            _t("positive", P.POSITIVE, "+", True, "Supply/sense positive"),
            _t("negative", P.NEGATIVE, "-", True, "Supply negative"),
            _t("data", P.DATA, "VE.Direct", False, "Connection to Cerbo GX"),
        ),
        wiring_rules=("Use the supplied shunt in the battery negative path.",),
        usage_notes="Displays state of charge.",
        width=140,
        height=140,
    ),
    DeviceDefinition(
        type="smartshunt",
        name="SmartShunt",
        description="Battery monitor. Measures voltage and current to calculate state of charge.",
        category=DeviceCategory.CONTROL,
        terminals=(
            _t("battery-minus", P.NEGATIVE, "TO BATT -", True, "Connect ONLY to battery negative terminal"),
            _t("system-minus", P.NEGATIVE, "TO SYSTEM -", True, "Connect to negative busbar/loads"),
            _t("vbatt-plus", P.POSITIVE, "Vbatt+", False, "Voltage sensing wire to battery positive (includes fuse)"),
            _t("data", P.DATA, "VE.Direct", False, "Connection to Cerbo GX"),
        ),
        wiring_rules=(
            "Must be the very first thing connected to the battery negative.",
            "No other loads should be connected directly to the battery negative.",
            "Current flows from Battery Minus -> Shunt -> System Minus.",
        ),
        usage_notes="Crucial for accurate battery monitoring. Acts as the system's fuel gauge.",
        width=140,
        height=130,
    ),
    DeviceDefinition(
        type="battery",
        name="Battery Bank",
        description="Energy storage. Typically LiFePO4 or AGM.",
        category=DeviceCategory.STORAGE,
        terminals=(
            _t("positive", P.POSITIVE, "+", True, "Main positive terminal"),
            _t("negative", P.NEGATIVE, "-", True, "Main negative terminal"),
        ),
        wiring_rules=(
            "Positive terminal connects to main fuse/switch then positive busbar.",
            "Negative terminal connects ONLY to the Shunt (if present) or negative busbar.",
        ),
        usage_notes="Stores DC energy. Voltage (12V/24V/48V) must match system voltage.",
        width=160,
        height=110,
    ),
    DeviceDefinition(
        type="solar-panel",
        name="Solar Panel",
        description="Generates DC power from sunlight.",
        category=DeviceCategory.SOURCE,
        terminals=(
            _t("positive", P.PV_POSITIVE, "+", True, "PV output positive"),
            _t("negative", P.PV_NEGATIVE, "-", True, "PV output negative"),
        ),
        wiring_rules=(
            "Connects to MPPT PV input.",
            "Can be wired in series (higher voltage) or parallel (higher current).",
        ),
        usage_notes="Source of renewable energy.",
        width=140,
        height=120,
    ),
    DeviceDefinition(
        type="dc-load",
        name="DC Load",
        description="Generic DC consumer (Lights, Pump, Fridge).",
        category=DeviceCategory.LOAD,
        terminals=(
            _t("positive", P.POSITIVE, "+", True, "DC Positive input"),
            _t("negative", P.NEGATIVE, "-", True, "DC Negative input"),
        ),
        wiring_rules=(
            "Connects to DC fuse block or distribution panel.",
            "Requires appropriate fusing.",
        ),
        usage_notes="Consumes power from the battery/system.",
        width=120,
        height=100,
    ),
    DeviceDefinition(
        type="ac-load",
        name="AC Load",
        description="Generic AC consumer (Outlet, Appliance).",
        category=DeviceCategory.LOAD,
        terminals=(
            _t("hot", P.AC_IN, "L", True, "Line/Hot"),
            _t("neutral", P.AC_IN, "N", True, "Neutral"),
            _t("ground", P.GROUND, "G", True, "Ground"),
        ),
        wiring_rules=(
            "Connects to AC distribution panel/breaker box.",
            "Powered by Inverter AC Out or Shore Power.",
        ),
        usage_notes="Household appliances running on 120V/230V.",
        width=120,
        height=100,
    ),
    DeviceDefinition(
        type="busbar-positive",
        name="Positive Busbar",
        description="Distribution point for DC positive connections.",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(_t("main", P.POSITIVE, "Studs", False, "Multiple connection points"),)
        + tuple(_t(f"pos-{n}", P.POSITIVE, str(n), False) for n in range(1, 7)),
        wiring_rules=(
            "Connects battery (via fuse/switch), chargers, and loads.",
            "Keep connections clean and tight.",
        ),
        usage_notes="Centralizes positive connections.",
        width=200,
        height=60,
    ),
    DeviceDefinition(
        type="busbar-negative",
        name="Negative Busbar",
        description="Distribution point for DC negative connections.",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(_t("main", P.NEGATIVE, "Studs", False, "Multiple connection points"),)
        + tuple(_t(f"neg-{n}", P.NEGATIVE, str(n), False) for n in range(1, 7)),
        wiring_rules=(
            "Connects to Shunt 'System Minus' side.",
            "Connects all load and charger negatives.",
        ),
        usage_notes="Centralizes negative connections.",
        width=200,
        height=60,
    ),
    DeviceDefinition(
        type="fuse",
        name="Fuse / Breaker",
        description="Overcurrent protection device. Essential for safety.",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(
            _t("in", P.POSITIVE, "IN", True, "Line side"),
            _t("out", P.POSITIVE, "OUT", True, "Load side"),
        ),
        wiring_rules=(
            "Must be placed as close as possible to the power source (Battery/Busbar).",
            "Size based on the wire's ampacity, not the load.",
        ),
        usage_notes="Protects the wire from melting in case of a short circuit.",
        width=80,
        height=60,
    ),
    DeviceDefinition(
        type="switch",
        name="Battery Switch",
        description="High current disconnect switch.",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(
            _t("in", P.POSITIVE, "IN", True, "From Battery/Fuse"),
            _t("out", P.POSITIVE, "OUT", True, "To Busbar/Load"),
        ),
        wiring_rules=(
            "Install after the main fuse.",
            "Used to isolate the battery bank for service or storage.",
        ),
        usage_notes="Manual disconnect for safety.",
        width=80,
        height=80,
    ),
    DeviceDefinition(
        type="breaker-panel",
        name="AC/DC Breaker Panel",
        description="Distribution panel with circuit breakers for individual loads.",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(
            _t("main-in-pos", P.POSITIVE, "MAIN +", True, "Main DC Feed"),
            _t("main-in-neg", P.NEGATIVE, "MAIN -", True, "Main DC Negative"),
        )
        + tuple(
            _t(f"load-{n}-pos", P.POSITIVE, f"L{n}", False, f"Load {n} Positive")
            for n in range(1, 5)
        ),
        wiring_rules=(
            "Connects to the main busbars.",
            "Provides fused outputs for smaller loads (lights, pumps).",
        ),
        usage_notes="Organizes and protects individual circuits.",
        width=160,
        height=200,
    ),
    DeviceDefinition(
        type="ac-panel",
        name="AC Distribution Panel",
        description="Main breaker box for AC circuits (120V/230V).",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(
            _t("main-in-hot", P.AC_IN, "MAIN L", True, "Main AC Input (Hot)"),
            _t("main-in-neutral", P.AC_IN, "MAIN N", True, "Main AC Input (Neutral)"),
            _t("main-in-ground", P.GROUND, "MAIN G", True, "Main Ground"),
        )
        + tuple(
            terminal
            for n in range(1, 3)
            for terminal in (
                _t(f"load-{n}-hot", P.AC_OUT, f"L{n}", False, f"Load {n} Hot"),
                _t(f"load-{n}-neutral", P.AC_OUT, f"N{n}", False, f"Load {n} Neutral"),
                _t(f"load-{n}-ground", P.GROUND, f"G{n}", False, f"Load {n} Ground"),
            )
        ),
        wiring_rules=(
            "Connects to Inverter AC OUT or Shore Power.",
            "Distributes AC power to outlets and appliances.",
        ),
        usage_notes="Contains breakers for AC safety.",
        width=180,
        height=220,
    ),
    DeviceDefinition(
        type="dc-panel",
        name="DC Distribution Panel",
        description="Fused distribution block for DC loads.",
        category=DeviceCategory.DISTRIBUTION,
        terminals=(
            _t("main-in-pos", P.POSITIVE, "MAIN +", True, "Main DC Positive Feed"),
            _t("main-in-neg", P.NEGATIVE, "MAIN -", True, "Main DC Negative Feed"),
        )
        + tuple(
            terminal
            for n in range(1, 4)
            for terminal in (
                _t(f"load-{n}-pos", P.POSITIVE, f"L{n} +", False, f"Load {n} Positive"),
                _t(f"load-{n}-neg", P.NEGATIVE, f"L{n} -", False, f"Load {n} Negative"),
            )
        ),
        wiring_rules=(
            "Connects to main busbars.",
            "Provides fused outputs for DC loads.",
        ),
        usage_notes="Centralized fusing for 12V/24V/48V loads.",
        width=160,
        height=240,
    ),
]

DEVICE_DEFINITIONS: dict[str, DeviceDefinition] = {d.type: d for d in _DEFINITIONS}
