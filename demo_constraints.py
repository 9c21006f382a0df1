"""
Demo: Build the example car model, clone it, and print its constraints.
"""

from featmodel.config import Settings, configure_logging
from featmodel.examples import build_example_car_model


def print_model(model):
    """Pretty-print the features and constraints of a model."""
    print()
    print("=" * 70)
    print(f"FEATURE MODEL: {model.name}")
    print("=" * 70)
    print()

    print("FEATURES")
    for feature in model.features:
        depth = 0
        parent = feature.parent
        while parent is not None:
            depth += 1
            parent = parent.parent
        flags = []
        if feature.abstract:
            flags.append("abstract")
        if feature.hidden:
            flags.append("hidden")
        suffix = f" ({', '.join(flags)})" if flags else ""
        print(f"  {'  ' * depth}{feature.name}{suffix}")
    print()

    print("CONSTRAINTS")
    for constraint in model.constraints:
        names = ", ".join(f.name for f in constraint.get_contained_features())
        print(f"  {constraint.display_name}")
        print(f"    features: {names}")
        if constraint.description:
            print(f"    description: {constraint.description}")
        if constraint.get_tags():
            print(f"    tags: {', '.join(sorted(constraint.get_tags()))}")
        if constraint.is_from_external_source():
            print(f"    origin: {constraint.origin}")
        if constraint.has_hidden_features():
            print("    ⚠ references hidden features")
    print()


if __name__ == "__main__":
    configure_logging(Settings(log_level="INFO"))

    model = build_example_car_model()
    print_model(model)

    variant = model.clone(name="Car (copy)")
    print_model(variant)
