# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.


"""
Built-in mechanical systems.
"""

from .double_pendulum import (
    L_double_double_pendulum,
    L_double_pendulum,
    angles_to_rect,
    build_double_double_lagrangian,
    build_lagrangian,
    kinetic_energy,
    potential_energy,
    rectangular_lagrangian,
)

__all__ = [
    "L_double_double_pendulum",
    "L_double_pendulum",
    "angles_to_rect",
    "build_double_double_lagrangian",
    "build_lagrangian",
    "kinetic_energy",
    "potential_energy",
    "rectangular_lagrangian",
]
