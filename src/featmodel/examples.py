"""
Example feature model builder.

Builds a small car product line:

    Car
    ├── Engine
    │   ├── Electric
    │   └── Combustion
    ├── Transmission
    │   ├── Manual
    │   └── Automatic
    ├── GPS
    └── Diagnostics (hidden)
        └── Telemetry

with constraints between the leaves, including one imported from an
external supplier model.
"""
from featmodel.constraints import Origin
from featmodel.expressions import and_, implies, not_, or_, var
from featmodel.model import FeatureModel


def build_example_car_model(supplier: str = "supplier-catalog") -> FeatureModel:
    model = FeatureModel(name="Car")

    car = model.add_feature("Car", abstract=True)

    engine = model.add_feature("Engine", parent=car, abstract=True)
    model.add_feature("Electric", parent=engine)
    model.add_feature("Combustion", parent=engine)

    transmission = model.add_feature("Transmission", parent=car, abstract=True)
    model.add_feature("Manual", parent=transmission)
    model.add_feature("Automatic", parent=transmission)

    model.add_feature("GPS", parent=car)

    diagnostics = model.add_feature("Diagnostics", parent=car, hidden=True)
    model.add_feature("Telemetry", parent=diagnostics)

    # Electric cars have no manual gearbox
    electric_automatic = model.create_constraint(implies(var("Electric"), not_(var("Manual"))))
    electric_automatic.description = "Electric cars ship with automatic transmission"
    electric_automatic.set_tags({"powertrain"})

    # Exactly one engine (the alternative part; the tree itself is not encoded)
    model.create_constraint(
        and_(
            or_(var("Electric"), var("Combustion")),
            not_(and_(var("Electric"), var("Combustion"))),
        )
    )

    # Imported from the supplier's catalog
    telemetry = model.create_constraint(
        implies(var("GPS"), var("Telemetry")),
        origin=Origin.external(supplier),
    )
    telemetry.set_tags({"supplier", "connectivity"})

    return model
