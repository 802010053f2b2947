"""
File I/O for sampled array patterns, element tables and array descriptions.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import h5py
import numpy as np
import xarray as xr

from .array import ArrayElement, ElementArray
from .elements import DataTableElement, OmniElement, create_element
from .errors import PatternWriteError
from .geometry import Point

# Configure logging
logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {'.csv', '.txt'}
HDF5_SUFFIXES = {'.h5', '.hdf5'}


def write_text_grid(pattern: xr.DataArray, file_path: Union[str, Path], decimals: int = 2,
                    delimiter: str = ',') -> None:
    """
    Write a sampled pattern as a delimited text grid.

    The header row holds theta in degrees, the leading column phi in degrees and
    each cell the gain magnitude rounded to the given number of decimals.

    Args:
        pattern: Gain magnitudes with dims (phi, theta), as from sample_pattern
        file_path: Path to save the file to
        decimals: Decimal places of each gain cell
        delimiter: Column separator

    Raises:
        PatternWriteError: If the file cannot be written
    """
    file_path = Path(file_path)
    theta = pattern.theta.values
    phi = pattern.phi.values
    values = pattern.transpose('phi', 'theta').values

    try:
        with open(file_path, 'w') as f:
            f.write(delimiter.join(['phi\\theta'] + [f"{t:g}" for t in theta]) + "\n")
            for phi_idx, phi_val in enumerate(phi):
                cells = [f"{v:.{decimals}f}" for v in values[phi_idx]]
                f.write(delimiter.join([f"{phi_val:g}"] + cells) + "\n")
    except OSError as e:
        raise PatternWriteError(f"Cannot write text grid to {file_path}: {e}") from e

    logger.info(f"Pattern grid written to {file_path}")


def read_text_grid(file_path: Union[str, Path], delimiter: str = ',') -> xr.DataArray:
    """
    Read a delimited text grid written by write_text_grid.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If the grid is malformed
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Pattern grid not found: {file_path}")

    with open(file_path, 'r') as f:
        lines = [line.strip() for line in f if line.strip()]

    if not lines:
        raise ValueError("Pattern grid file is empty")

    theta = np.array([float(v) for v in lines[0].split(delimiter)[1:]])
    phi = []
    rows = []
    for line in lines[1:]:
        fields = line.split(delimiter)
        if len(fields) != len(theta) + 1:
            raise ValueError(f"Invalid grid row: {line}")
        phi.append(float(fields[0]))
        rows.append([float(v) for v in fields[1:]])

    logger.info(f"Pattern grid loaded from {file_path}")
    return xr.DataArray(
        np.array(rows, dtype=np.float64).reshape(len(phi), len(theta)),
        dims=('phi', 'theta'),
        coords={'phi': np.array(phi), 'theta': theta},
        name='gain',
    )


def write_hdf5(pattern: xr.DataArray, file_path: Union[str, Path],
               compression: Optional[str] = 'gzip', compression_level: int = 4) -> None:
    """
    Write a sampled pattern to an HDF5 file.

    Layout: group "dir" with a row-major float64 dataset "gain" indexed
    [phi][theta], plus "theta" and "phi" axis datasets in degrees. The sweep
    parameters are stored as attributes of the group.

    Args:
        pattern: Gain magnitudes with dims (phi, theta), as from sample_pattern
        file_path: Path to save the file to
        compression: 'gzip', 'lzf' or None; all options are lossless
        compression_level: gzip level (0-9), ignored for other filters

    Raises:
        PatternWriteError: If the file or dataset cannot be created
    """
    file_path = Path(file_path)
    values = np.ascontiguousarray(pattern.transpose('phi', 'theta').values, dtype=np.float64)
    options = {}
    if compression is not None:
        options['compression'] = compression
        if compression == 'gzip':
            options['compression_opts'] = compression_level

    try:
        with h5py.File(file_path, 'w') as h5:
            group = h5.create_group('dir')
            group.create_dataset('gain', data=values, **options)
            group.create_dataset('theta', data=np.asarray(pattern.theta.values, dtype=np.float64))
            group.create_dataset('phi', data=np.asarray(pattern.phi.values, dtype=np.float64))
            for key, value in pattern.attrs.items():
                group.attrs[key] = value
    except OSError as e:
        raise PatternWriteError(f"Cannot write HDF5 pattern to {file_path}: {e}") from e

    logger.info(f"Pattern written to {file_path}")


def read_hdf5(file_path: Union[str, Path]) -> xr.DataArray:
    """
    Read a pattern written by write_hdf5.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If the file has no dir/gain dataset
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Pattern file not found: {file_path}")

    with h5py.File(file_path, 'r') as h5:
        if 'dir' not in h5 or 'gain' not in h5['dir']:
            raise ValueError(f"{file_path} has no dir/gain dataset")
        group = h5['dir']
        values = group['gain'][:]
        theta = group['theta'][:] if 'theta' in group else np.arange(values.shape[1], dtype=float)
        phi = group['phi'][:] if 'phi' in group else np.arange(values.shape[0], dtype=float)
        attrs = {key: _to_python(value) for key, value in group.attrs.items()}

    logger.info(f"Pattern loaded from {file_path}")
    return xr.DataArray(values, dims=('phi', 'theta'), coords={'phi': phi, 'theta': theta},
                        name='gain', attrs=attrs)


def pattern_format(file_path: Union[str, Path]) -> str:
    """
    Output format implied by a file suffix.

    Returns:
        str: 'text' for .csv/.txt, 'hdf5' for .h5/.hdf5

    Raises:
        ValueError: If the suffix is not a supported pattern format
    """
    suffix = Path(file_path).suffix.lower()
    if suffix in TEXT_SUFFIXES:
        return 'text'
    if suffix in HDF5_SUFFIXES:
        return 'hdf5'
    raise ValueError(f"Unsupported pattern format: {suffix!r}. "
                     f"Use one of {sorted(TEXT_SUFFIXES | HDF5_SUFFIXES)}")


def write_pattern(pattern: xr.DataArray, file_path: Union[str, Path], decimals: int = 2,
                  compression: Optional[str] = 'gzip') -> None:
    """
    Write a sampled pattern, choosing the format from the file suffix.

    .csv/.txt produce a text grid rounded to `decimals`, .h5/.hdf5 an HDF5
    dataset using `compression`. Options of the other format are ignored.

    Raises:
        ValueError: If the suffix is not a supported pattern format
        PatternWriteError: If the file cannot be written
    """
    if pattern_format(file_path) == 'text':
        write_text_grid(pattern, file_path, decimals=decimals)
    else:
        write_hdf5(pattern, file_path, compression=compression)


def save_table_npz(element: DataTableElement, file_path: Union[str, Path]) -> Path:
    """
    Save the samples of a table element to NPZ format.

    Returns:
        Path: The path written, with a .npz suffix
    """
    file_path = Path(file_path)
    if file_path.suffix.lower() != '.npz':
        file_path = file_path.with_suffix('.npz')

    save_dict = {
        'theta': element.theta,
        'phi': element.phi,
        'samples': element.samples,
    }
    if element.offset is not None:
        save_dict['offset'] = element.offset.as_array()

    np.savez_compressed(file_path, **save_dict)
    logger.info(f"Element table saved to {file_path}")
    return file_path


def load_table_npz(file_path: Union[str, Path], offset: Optional[Point] = None) -> DataTableElement:
    """
    Load a table element from NPZ format.

    Args:
        file_path: Path to the NPZ file
        offset: Phase center offset, overriding one stored in the file

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If required arrays are missing
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Element table not found: {file_path}")

    with np.load(file_path) as data:
        missing = {'theta', 'phi', 'samples'} - set(data.files)
        if missing:
            raise ValueError(f"Element table {file_path} is missing {sorted(missing)}")
        if offset is None and 'offset' in data.files:
            offset = Point.from_array(data['offset'])
        element = DataTableElement(data['theta'], data['phi'], data['samples'], offset=offset)

    logger.info(f"Element table loaded from {file_path}")
    return element


def _to_python(value):
    if isinstance(value, np.generic):
        return value.item()
    return value


def _complex_to_json(value: complex):
    return [float(value.real), float(value.imag)]


def _complex_from_json(value) -> complex:
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            raise ValueError(f"Complex value must be [real, imag], got {value}")
        return complex(value[0], value[1])
    return complex(value)


def save_array_json(array: ElementArray, file_path: Union[str, Path],
                    metadata: Optional[Dict[str, Any]] = None) -> None:
    """
    Save an array description to JSON.

    Table samples are written next to the JSON file as <stem>_table<channel>.npz
    and referenced by relative path.

    Args:
        array: Array to describe
        file_path: Path of the JSON file
        metadata: Optional metadata to include
    """
    file_path = Path(file_path)
    elements = []
    for channel, element in enumerate(array):
        model = element.model.to_dict()
        if isinstance(element.model, DataTableElement):
            table_path = save_table_npz(element.model, file_path.with_name(f"{file_path.stem}_table{channel}.npz"))
            model['table'] = table_path.name
        elements.append({
            'model': model,
            'position': list(element.position),
            'weight': _complex_to_json(element.weight),
        })

    description = {'format': 'array_pattern array', 'version': '1.0', 'elements': elements}
    if metadata:
        description['metadata'] = metadata

    try:
        with open(file_path, 'w') as f:
            json.dump(description, f, indent=2)
    except OSError as e:
        raise PatternWriteError(f"Cannot write array description to {file_path}: {e}") from e
    logger.info(f"Array description with {len(elements)} element(s) saved to {file_path}")


def load_array_json(file_path: Union[str, Path]) -> ElementArray:
    """
    Build an array from a JSON description.

    Each entry of "elements" holds a "model" (with "kind" and its constructor
    parameters), an optional "position" [x, y, z] in meters and an optional
    "weight" given as [real, imag] or a number. Data table models reference
    their samples with a "table" NPZ path relative to the JSON file.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If the description is malformed
        InvalidGeometry: If an element has invalid geometry
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Array description not found: {file_path}")

    with open(file_path, 'r') as f:
        description = json.load(f)

    if 'elements' not in description:
        raise ValueError(f"Array description {file_path} has no 'elements' list")

    array = ElementArray()
    for channel, entry in enumerate(description['elements']):
        params = dict(entry.get('model', {}))
        kind = params.pop('kind', None)
        if kind is None:
            raise ValueError(f"Element {channel} has no model kind")

        position = Point.from_array(entry['position']) if entry.get('position') is not None else None
        weight = _complex_from_json(entry.get('weight', 1.0))

        if kind == DataTableElement.kind:
            if 'table' not in params:
                raise ValueError(f"Data element {channel} has no 'table' path")
            offset = params.get('offset')
            model = load_table_npz(file_path.parent / params['table'],
                                   offset=Point.from_array(offset) if offset is not None else None)
        elif kind == OmniElement.kind:
            if params.get('position') is not None:
                params['position'] = Point.from_array(params['position'])
            elif position is not None:
                params['position'] = position
            if 'weight' in params:
                params['weight'] = _complex_from_json(params['weight'])
            model = create_element(kind, **params)
        else:
            model = create_element(kind, **params)

        array.append(ArrayElement(model, position=position, weight=weight))

    logger.info(f"Array with {len(array)} element(s) loaded from {file_path}")
    return array
