from typing import Any, Dict, Mapping, Optional, Tuple

from mididb.registry.resolver import iter_brands


def count_database(db: Mapping) -> Tuple[int, int]:
    """(brand count, device count) of a database, metadata keys excluded."""
    brands = 0
    devices = 0
    for _, brand_data in iter_brands(db):
        brands += 1
        if isinstance(brand_data, Mapping):
            devices += len(brand_data)
    return brands, devices


def _kb(size: int) -> float:
    return round(size / 1024, 2)


def compute_statistics(
    final_db: Mapping,
    target_db: Mapping,
    source_db: Mapping,
    sizes: Optional[Mapping[str, int]] = None,
) -> Dict[str, Any]:
    """
    Merge statistics derived from one completed final database.
    Args:
        sizes: optional byte sizes keyed "pretty", "minified", "gzip"
    """
    cc = nrpn = pc = 0
    for _, devices in iter_brands(final_db):
        for device in devices.values():
            cc += len(device.get("cc") or [])
            nrpn += len(device.get("nrpn") or [])
            pc += len(device.get("pc") or [])
    final_brands, final_devices = count_database(final_db)
    target_brands, target_devices = count_database(target_db)
    source_brands, source_devices = count_database(source_db)

    stats: Dict[str, Any] = {
        "target": {"brands": target_brands, "devices": target_devices},
        "source": {"brands": source_brands, "devices": source_devices},
        "final": {
            "brands": final_brands,
            "devices": final_devices,
            "cc": cc,
            "nrpn": nrpn,
            "pc": pc,
            "parameters": cc + nrpn + pc,
        },
        "removed_duplicates": {
            "brands": target_brands + source_brands - final_brands,
            "devices": target_devices + source_devices - final_devices,
        },
    }
    if sizes:
        files = {f"{name}_kb": _kb(size) for name, size in sizes.items()}
        if sizes.get("pretty") and "gzip" in sizes:
            files["compression_ratio"] = round(sizes["gzip"] / sizes["pretty"] * 100, 1)
        stats["files"] = files
    return stats


def format_statistics(stats: Mapping[str, Any]) -> str:
    target = stats["target"]
    source = stats["source"]
    final = stats["final"]
    removed = stats["removed_duplicates"]
    lines = [
        "Merge Results:",
        f"- Target Database: {target['brands']} brands, {target['devices']} devices",
        f"- Source Database: {source['brands']} brands, {source['devices']} devices",
        f"- Final Database: {final['brands']} brands, {final['devices']} devices",
        f"- Removed duplicates: {removed['brands']} brands, {removed['devices']} devices",
    ]
    files = stats.get("files")
    if files:
        lines.append("")
        lines.append("File Sizes:")
        if "pretty_kb" in files:
            lines.append(f"- Pretty JSON: {files['pretty_kb']:.2f} KB")
        if "minified_kb" in files:
            lines.append(f"- Minified JSON: {files['minified_kb']:.2f} KB")
        if "gzip_kb" in files:
            lines.append(f"- GZipped JSON: {files['gzip_kb']:.2f} KB")
        if "compression_ratio" in files:
            lines.append(f"- Compression ratio: {files['compression_ratio']:.1f}%")
    lines.extend(
        [
            "",
            "Database Statistics:",
            f"- Brands: {final['brands']}",
            f"- Devices: {final['devices']}",
            f"- CC Parameters: {final['cc']}",
            f"- NRPN Parameters: {final['nrpn']}",
            f"- PC Parameters: {final['pc']}",
            f"- Total Parameters: {final['parameters']}",
        ]
    )
    return "\n".join(lines)
