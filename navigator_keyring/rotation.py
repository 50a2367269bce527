"""
Keyring Rotation — Re-encryption of stored envelopes under a newer key.

Adding a key makes it current for new data only; envelopes produced under
older keys stay decryptable as long as their key remains in the keyring.
``rotate_all`` re-encrypts a batch of stored envelopes so old keys can
eventually be retired. The operation is idempotent: envelopes already at
the target key version are skipped.

Security Note:
    Plaintext exists in memory only during re-encryption of each item.
    Never log plaintext or ciphertext values.
"""
import logging
from collections.abc import Iterable
from typing import Optional, Union

from .exceptions import EmptyKeyring, KeyringError
from .keyring import Envelope, Keyring
from .key import normalize_id

logger = logging.getLogger("navigator.keyring")


def _target_key_id(keyring: Keyring, target_key_id: Optional[Union[int, str]]) -> int:
    if target_key_id is None:
        current = keyring.current_key()
        if current is None:
            raise EmptyKeyring("keyring doesn't have any keys")
        return current.id
    return keyring.lookup(target_key_id).id


def rotate(
    keyring: Keyring,
    ciphertext: bytes,
    key_id: Union[int, str],
    target_key_id: Optional[Union[int, str]] = None,
) -> Envelope:
    """Decrypt ciphertext under ``key_id`` and re-encrypt it.

    Args:
        keyring: Keyring holding both the source and the target key.
        ciphertext: Ciphertext produced under ``key_id``.
        key_id: Source key version.
        target_key_id: Target key version; defaults to the current key.

    Returns:
        New Envelope under the target key.

    Raises:
        EmptyKeyring, UnknownKey: If a key id cannot be resolved.
        InvalidAuthentication: If the ciphertext is rejected.
    """
    target = _target_key_id(keyring, target_key_id)
    plaintext = keyring.decrypt(ciphertext, key_id)
    return keyring.encrypt(plaintext, target)


def rotate_all(
    keyring: Keyring,
    envelopes: Iterable[tuple],
    target_key_id: Optional[Union[int, str]] = None,
) -> tuple[list[Envelope], dict]:
    """Re-encrypt envelopes from any key version to ``target_key_id``.

    Items failing to rotate are logged, counted as errors and returned
    unchanged, so a single bad item does not abort the batch.

    Args:
        keyring: Keyring holding all referenced key versions.
        envelopes: (ciphertext, key_id, digest) triples.
        target_key_id: Target key version; defaults to the current key.

    Returns:
        Tuple of (envelopes in input order, stats dict with keys:
        total, rotated, skipped, errors).

    Raises:
        EmptyKeyring, UnknownKey: If the target key cannot be resolved.
    """
    target = _target_key_id(keyring, target_key_id)
    stats = {"total": 0, "rotated": 0, "skipped": 0, "errors": 0}
    result: list[Envelope] = []

    logger.info("Starting key rotation to v%d", target)

    for index, item in enumerate(envelopes):
        envelope = Envelope(*item)
        stats["total"] += 1
        try:
            envelope = envelope._replace(key_id=normalize_id(envelope.key_id))
        except ValueError as err:
            logger.error("Error rotating item=%d: %s", index, err)
            stats["errors"] += 1
            result.append(envelope)
            continue
        if envelope.key_id == target:
            stats["skipped"] += 1
            result.append(envelope)
            continue
        try:
            result.append(rotate(keyring, envelope.ciphertext, envelope.key_id, target))
            stats["rotated"] += 1
        except KeyringError as err:
            logger.error(
                "Error rotating item=%d from v%s: %s",
                index, envelope.key_id, err,
            )
            stats["errors"] += 1
            result.append(envelope)

    logger.info("Key rotation complete: %s", stats)
    return result, stats
