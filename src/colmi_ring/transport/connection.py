"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import BLEConnectionError, BLETimeoutError
from ..models.readings import DeviceInfo
from ..protocol import (
    FIRMWARE_REVISION_UUID,
    HARDWARE_REVISION_UUID,
    RX_CHAR_UUID,
    SERVICE_UUID,
    TX_CHAR_UUID,
)

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)

NotificationHandler = Callable[[bytes], None]
DisconnectHandler = Callable[[], None]


class BLEConnection:
    """Manages the BLE connection to a ring.

    Features:
    - Automatic retry logic with bleak-retry-connector
    - Service caching for faster reconnections
    - Context manager for automatic cleanup
    - Notifications forwarded in arrival order to a single handler
    """

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            timeout: float = 10.0,
            max_attempts: int = 4,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        Args:
            mac_address: Ring MAC address
            ble_device: Optional BLEDevice from Home Assistant bluetooth integration
            timeout: Connection timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 4)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
        """
        self.mac_address = mac_address
        self.ble_device = ble_device
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._notification_handler: NotificationHandler | None = None
        self._disconnect_handler: DisconnectHandler | None = None

    async def __aenter__(self) -> BLEConnection:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    def set_notification_handler(self, handler: NotificationHandler | None) -> None:
        """Register the callback receiving every notification from the ring."""
        self._notification_handler = handler

    def set_disconnect_handler(self, handler: DisconnectHandler | None) -> None:
        """Register the callback invoked when the link drops."""
        self._disconnect_handler = handler

    async def connect(self) -> None:
        """Establish BLE connection to the ring.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return

        try:
            _LOGGER.debug(
                "Connecting to %s with bleak-retry-connector (max_attempts=%d)",
                self.mac_address,
                self.max_attempts
            )

            if self.ble_device:
                device = self.ble_device
            else:
                device = await BleakScanner.find_device_by_address(
                    self.mac_address,
                    timeout=self.timeout
                )
                if device is None:
                    raise BLEConnectionError(
                        f"Device {self.mac_address} not found during scan"
                    )

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or self.mac_address,
                disconnected_callback=self._on_disconnect,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )

            _LOGGER.debug("Connected to %s", self.mac_address)

            await self._setup_notifications()

        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except BLEConnectionError:
            raise
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from the ring."""
        if self._client and self._client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self.mac_address)
                await self._client.disconnect()
            except BleakError as e:
                _LOGGER.warning("Error during disconnect: %s", e)
            finally:
                self._client = None

    async def _setup_notifications(self) -> None:
        """Subscribe to the ring's notify characteristic.

        Raises:
            BLEConnectionError: If service/characteristic not found
        """
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")

        service = self._client.services.get_service(SERVICE_UUID)
        if not service:
            raise BLEConnectionError(f"Service {SERVICE_UUID} not found")
        if service.get_characteristic(TX_CHAR_UUID) is None:
            raise BLEConnectionError(f"Characteristic {TX_CHAR_UUID} not found")

        await self._client.start_notify(TX_CHAR_UUID, self._notification_callback)

        _LOGGER.debug("Notifications started")

    def _notification_callback(self, sender, data: bytearray) -> None:
        """Forward a notification to the registered handler."""
        if self._notification_handler is None:
            _LOGGER.debug("Dropping notification %s, no handler", bytes(data).hex())
            return
        self._notification_handler(bytes(data))

    def _on_disconnect(self, client: BleakClient) -> None:
        _LOGGER.debug("Disconnected from %s", self.mac_address)
        self._client = None
        if self._disconnect_handler is not None:
            self._disconnect_handler()

    async def write(self, data: bytes) -> None:
        """Write one command packet to the ring.

        Raises:
            BLEConnectionError: If not connected or write fails
        """
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")

        try:
            await self._client.write_gatt_char(RX_CHAR_UUID, data, response=False)
        except BleakError as e:
            raise BLEConnectionError(f"Write failed: {e}") from e

    async def read_device_info(self) -> DeviceInfo:
        """Read revision strings from the Device Information service.

        Raises:
            BLEConnectionError: If not connected
        """
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")

        return DeviceInfo(
            hardware_version=await self._read_string(HARDWARE_REVISION_UUID),
            firmware_version=await self._read_string(FIRMWARE_REVISION_UUID),
        )

    async def _read_string(self, uuid: str) -> str | None:
        try:
            value = await self._client.read_gatt_char(uuid)
        except BleakError as e:
            _LOGGER.debug("Could not read %s: %s", uuid, e)
            return None
        return bytes(value).decode("utf-8", errors="replace").strip("\x00").strip()

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to the ring."""
        return self._client is not None and self._client.is_connected
