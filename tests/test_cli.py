# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

import pytest

import rsacore
from rsacore import __main__ as cli
from rsacore import keycodec
import rsacore.rsa as rsau


@pytest.fixture
def keyfiles(tmp_path):
    pub, priv = tmp_path / "key.pub", tmp_path / "key.priv"
    assert cli.main(["-q", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "512"]) == 0
    return pub, priv


def test_keygen_writes_keys(keyfiles):
    pub, priv = keyfiles
    pubkey = rsau.import_public_key(keycodec.read_key(pub))
    privkey = rsau.import_private_key(keycodec.read_key(priv))
    assert pubkey.e == 65537
    assert pubkey.n == privkey.n
    assert pubkey.n.bit_length() in (511, 512)


def test_keygen_exponent(mocker, tmp_path):
    # 3 is coprime with (11 - 1) * (17 - 1).
    mocker.patch("rsacore.keygen.generate_prime", side_effect=[11, 17])
    pub, priv = tmp_path / "key.pub", tmp_path / "key.priv"
    assert cli.main(["-q", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "512", "--pub-exponent", "3"]) == 0
    assert rsau.import_public_key(keycodec.read_key(pub)) == rsau.PublicKey(3, 187)
    assert rsau.import_private_key(keycodec.read_key(priv)) == rsau.PrivateKey(107, 187)


def test_keygen_refuses_overwrite(keyfiles, capsys):
    pub, priv = keyfiles
    before = keycodec.read_key(priv)
    assert cli.main(["keygen", "-p", str(pub), "-P", str(priv), "--keysize", "512"]) == 1
    assert "already exists" in capsys.readouterr().err
    assert keycodec.read_key(priv) == before
    assert cli.main(["-q", "keygen", "-p", str(pub), "-P", str(priv), "--keysize", "512", "--overwrite"]) == 0
    assert keycodec.read_key(priv) != before


def test_encrypt_decrypt(keyfiles, capsys):
    pub, priv = keyfiles
    assert cli.main(["-q", "encrypt", "-p", str(pub), "--message", "Hi there!"]) == 0
    armored = capsys.readouterr().out.strip()
    assert len(rsau.unwrap_ciphertext(armored)) == 64
    assert cli.main(["-q", "decrypt", "-P", str(priv), "--message", armored]) == 0
    assert capsys.readouterr().out == "Hi there!\n"


def test_encrypt_decrypt_files(keyfiles, tmp_path, capsys):
    pub, priv = keyfiles
    (tmp_path / "msg.txt").write_text("Zażółć", encoding="utf-16")
    assert cli.main(["-q", "encrypt", "-p", str(pub), "-e", "utf-16", "--message", f"P:{tmp_path / 'msg.txt'}"]) == 0
    (tmp_path / "msg.enc").write_text(capsys.readouterr().out, encoding="ascii")
    assert cli.main(["-q", "decrypt", "-P", str(priv), "-e", "utf-16", "--message", f"P:{tmp_path / 'msg.enc'}"]) == 0
    assert capsys.readouterr().out == "Zażółć\n"


def test_encrypt_output_header(keyfiles, capsys):
    pub, _ = keyfiles
    assert cli.main(["encrypt", "-p", str(pub), "--message", "Hi"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Ciphertext:\n")


def test_encrypt_too_long(keyfiles, capsys):
    pub, _ = keyfiles
    assert cli.main(["-q", "encrypt", "-p", str(pub), "--message", "A" * 60]) == 1
    assert "too long" in capsys.readouterr().err


def test_decrypt_garbage(keyfiles, capsys):
    _, priv = keyfiles
    assert cli.main(["-q", "decrypt", "-P", str(priv), "--message", "!!!"]) == 1
    assert "Error" in capsys.readouterr().err


def test_decrypt_wrong_key(keyfiles, tmp_path, capsys):
    pub, _ = keyfiles
    other_pub, other_priv = tmp_path / "other.pub", tmp_path / "other.priv"
    assert cli.main(["-q", "keygen", "-p", str(other_pub), "-P", str(other_priv), "--keysize", "512"]) == 0
    assert cli.main(["-q", "encrypt", "-p", str(pub), "--message", "Hi"]) == 0
    armored = capsys.readouterr().out.strip()
    assert cli.main(["-q", "decrypt", "-P", str(other_priv), "--message", armored]) == 1
    assert "Decryption error." in capsys.readouterr().err


def test_malformed_key_file(tmp_path, capsys):
    (tmp_path / "bad.pub").write_text("{}", encoding="utf-8")
    assert cli.main(["-q", "encrypt", "-p", str(tmp_path / "bad.pub"), "--message", "Hi"]) == 1
    assert "missing field" in capsys.readouterr().err


@pytest.mark.parametrize("subcommand,flag", [("encrypt", "-p"), ("decrypt", "-P")])
def test_missing_key_file(tmp_path, capsys, subcommand, flag):
    assert cli.main(["-q", subcommand, flag, str(tmp_path / "absent.key"), "--message", "Hi"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "absent.key" in err


def test_verbose_configures_logging(mocker, keyfiles):
    pub, _ = keyfiles
    basic = mocker.patch("logging.basicConfig")
    assert cli.main(["-q", "-V", "encrypt", "-p", str(pub), "--message", "Hi"]) == 0
    basic.assert_called_once()
    assert basic.call_args.kwargs["level"] == logging.DEBUG


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit):
        cli.main([])
    assert "subcommand" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit):
        cli.main(["--version"])
    assert rsacore.__version__ in capsys.readouterr().out
