import json
from collections import defaultdict
from pathlib import Path
from typing import List, NamedTuple

from eth_typing import ABI, ChecksumAddress
from eth_utils import to_checksum_address

from token_deployment import output
from token_deployment.errors import RegistryError

ChainId = int
ContractName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single deployed contract in a registry file."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def write_registry(entries: List[RegistryEntry], filepath: Path) -> Path:
    """
    Writes registry entries to a file, merging them into an existing registry
    when none of their chain IDs are already present.
    """
    if not entries:
        output.info("No entries provided.")
        return filepath

    # common order keeps registry diffs readable
    entries = sorted(entries, key=lambda entry: (str(entry.chain_id), entry.name))

    data = defaultdict(dict)
    for entry in entries:
        entry_abi = list(entry.abi)
        entry_abi.sort(key=lambda d: (d["type"], d.get("name", "")))

        data[str(entry.chain_id)][entry.name] = {
            "address": to_checksum_address(entry.address),
            "abi": entry_abi,
            "tx_hash": entry.tx_hash,
            "block_number": int(entry.block_number),
            "deployer": entry.deployer,
        }

    filepath.parent.mkdir(parents=True, exist_ok=True)

    if filepath.exists():
        output.info(f"Updating existing registry at {filepath}.")
        existing_data = _load_json(filepath)
        if not isinstance(existing_data, dict):
            raise ValueError(f"Malformed registry at {filepath}.")

        if any(chain_id in existing_data for chain_id in data):
            filepath = filepath.with_suffix(".unmerged.json")
            output.warning(
                "Cannot merge registries with overlapping chain IDs.\n"
                f"Writing to {filepath} to avoid overwriting existing data."
            )
        else:
            existing_data.update(data)
            data = existing_data
    else:
        output.info(f"Creating new registry at {filepath}.")

    with open(filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


def record_deployment(entry: RegistryEntry, output_filepath: Path) -> Path:
    """Records a single confirmed deployment in a registry file."""
    try:
        output_filepath = write_registry(entries=[entry], filepath=output_filepath)
    except (OSError, ValueError) as error:
        raise RegistryError(
            f"Could not record deployment in {output_filepath}: {error}"
        ) from error
    output.info(f"(i) Registry written to {output_filepath}!")
    return output_filepath
