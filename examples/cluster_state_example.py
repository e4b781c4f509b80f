"""
Usage example for the county clustering pipeline.

Builds a small synthetic QCEW table for Washington, clusters its counties with
k-medoids and with fuzzy c-means, and prints the FIPS -> group mapping a
choropleth renderer would consume. Point ``read_qcew`` at a real annual-averages
file (e.g. data/raw/allhlcn19.csv) to run on actual data.
"""

import logging

import numpy as np
import pandas as pd

from countycluster import (
    ClusteringConfig, cluster_counties, distance_table, topojson_feature_name,
)
from countycluster.config import (
    AREA_TYPE_COL, STATE_COL, COUNTY_COL, AREA_COL, OWNERSHIP_COL, INDUSTRY_COL,
    ESTABLISHMENTS_COL, EMPLOYMENT_COL, WAGE_COL,
    COUNTY_AREA_TYPE, PRIVATE_OWNERSHIP, ALL_INDUSTRIES,
)


def create_mock_qcew(n_counties=12, seed=0):
    """Mock county rows: a few large urban counties among many small rural ones."""
    rng = np.random.default_rng(seed)
    size = np.where(np.arange(n_counties) % 4 == 0, 20.0, 1.0) * rng.lognormal(0, 0.4, n_counties)
    establishments = np.round(150 * size)
    employment = np.round(establishments * rng.uniform(8, 14, n_counties))
    wage = np.round(600 + 40 * np.log(size) + rng.normal(0, 30, n_counties))
    return pd.DataFrame({
        AREA_TYPE_COL: COUNTY_AREA_TYPE,
        STATE_COL: "53",
        COUNTY_COL: [f"{2 * i + 1:03d}" for i in range(n_counties)],
        AREA_COL: [f"County {2 * i + 1}, Washington" for i in range(n_counties)],
        OWNERSHIP_COL: PRIVATE_OWNERSHIP,
        INDUSTRY_COL: ALL_INDUSTRIES,
        ESTABLISHMENTS_COL: establishments,
        EMPLOYMENT_COL: employment,
        WAGE_COL: wage,
    })


def simple_usage_example():
    print("=== County Clustering - Usage Example ===\n")

    print("1. Building mock QCEW data...")
    qcew = create_mock_qcew()
    print(f"   {len(qcew)} county rows")

    print("\n2. k-medoids (k=3, euclidean)...")
    config = ClusteringConfig(state="WA", algorithm="k-medoids", cluster_count=3)
    km = cluster_counties(qcew, config)
    print(f"   {km.result}")
    print(f"   Medoids: {km.result.medoid_fips}")
    print(km.groups_frame().to_string(index=False))

    print("\n3. Fuzzy c-means (C=3, m=2.0, seed 42)...")
    config = ClusteringConfig(
        state="WA", algorithm="fuzzy-c-means", cluster_count=3, fuzziness=2.0, random_seed=42,
    )
    fcm = cluster_counties(qcew, config)
    print(f"   {fcm.result}")
    print(f"   Partition coefficient: {fcm.result.partition_coefficient():.3f}")
    print("   Cluster centers (original units):")
    print(fcm.normalized.inverse_transform(fcm.result.centers).round(1).to_string())
    print(f"   Counties per group: {fcm.assignment.group_sizes().to_dict()}")

    print("\n4. Distance table (first 4 counties)...")
    print(distance_table(qcew, "WA").iloc[:4, :5].round(2).to_string(index=False))

    print(f"\nRender with TopoJSON object: {topojson_feature_name('WA')}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    simple_usage_example()
