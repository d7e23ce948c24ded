"""Opcode to mnemonic conversion for debug views and ROM listings."""

from typing import List

from .constants import PROGRAM_START

_ALU_OPS = {0x0: "LD", 0x1: "OR", 0x2: "AND", 0x3: "XOR", 0x4: "ADD",
            0x5: "SUB", 0x6: "SHR", 0x7: "SUBN", 0xE: "SHL"}

_MISC_OPS = {0x07: "LD Vx, DT", 0x0A: "LD Vx, K", 0x15: "LD DT, Vx",
             0x18: "LD ST, Vx", 0x1E: "ADD I, Vx", 0x29: "LD F, Vx",
             0x33: "LD B, Vx", 0x55: "LD [I], Vx", 0x65: "LD Vx, [I]"}


def disassemble(opcode: int, jump_uses_vx: bool = False) -> str:
    """Disassemble opcode to human-readable string"""
    nnn = opcode & 0x0FFF
    kk = opcode & 0x00FF
    n = opcode & 0x000F
    x = (opcode >> 8) & 0x0F
    y = (opcode >> 4) & 0x0F
    op = (opcode >> 12) & 0xF

    if opcode == 0x00E0:
        return "CLS"
    elif opcode == 0x00EE:
        return "RET"
    elif op == 0x1:
        return f"JP ${nnn:03X}"
    elif op == 0x2:
        return f"CALL ${nnn:03X}"
    elif op == 0x3:
        return f"SE V{x:X}, ${kk:02X}"
    elif op == 0x4:
        return f"SNE V{x:X}, ${kk:02X}"
    elif op == 0x5 and n == 0x0:
        return f"SE V{x:X}, V{y:X}"
    elif op == 0x6:
        return f"LD V{x:X}, ${kk:02X}"
    elif op == 0x7:
        return f"ADD V{x:X}, ${kk:02X}"
    elif op == 0x8 and n in _ALU_OPS:
        return f"{_ALU_OPS[n]} V{x:X}, V{y:X}"
    elif op == 0x9 and n == 0x0:
        return f"SNE V{x:X}, V{y:X}"
    elif op == 0xA:
        return f"LD I, ${nnn:03X}"
    elif op == 0xB:
        return f"JP V{x:X}, ${nnn:03X}" if jump_uses_vx else f"JP V0, ${nnn:03X}"
    elif op == 0xC:
        return f"RND V{x:X}, ${kk:02X}"
    elif op == 0xD:
        return f"DRW V{x:X}, V{y:X}, {n}"
    elif op == 0xE and kk == 0x9E:
        return f"SKP V{x:X}"
    elif op == 0xE and kk == 0xA1:
        return f"SKNP V{x:X}"
    elif op == 0xF and kk in _MISC_OPS:
        return _MISC_OPS[kk].replace("Vx", f"V{x:X}")

    return f"??? ${opcode:04X}"


def disassemble_program(data: bytes, start_addr: int = PROGRAM_START,
                        jump_uses_vx: bool = False) -> List[str]:
    """
    Convert a ROM image into listing lines of the form "ADDR:  MNEMONIC".
    A trailing odd byte is shown as data.
    """
    lines = []
    addr = start_addr
    i = 0
    while i + 1 < len(data):
        op = (data[i] << 8) | data[i + 1]
        lines.append(f"{addr:04X}:  {disassemble(op, jump_uses_vx)}")
        addr += 2
        i += 2
    if i < len(data):
        lines.append(f"{addr:04X}:  .byte ${data[i]:02X}")
    return lines
