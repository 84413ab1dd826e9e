"""Translation of storcli/perccli status acronyms"""

ACRONYMS = {
    # Virtual drive states
    'Optl': 'Optimal',
    'OfLn': 'OffLine',
    'Pdgd': 'Partially Degraded',
    'Dgrd': 'Degraded',
    'Rec': 'Recovery',
    'Cac': 'CacheCade',
    'HD': 'Hidden',
    'TRANS': 'TransportReady',
    'B': 'Blocked',
    # Access modes
    'RW': 'Read Write',
    'RO': 'Read Only',
    # Physical drive states
    'Onln': 'Online',
    'Offln': 'Offline',
    'UGood': 'Unconfigured Good',
    'UBad': 'Unconfigured Bad',
    'UGUnsp': 'Unconfigured Good Unsupported',
    'UBUnsp': 'Unconfigured Bad Unsupported',
    'UGShld': 'Unconfigured Good shielded',
    'HSPShld': 'Hotspare shielded',
    'CFShld': 'Configured shielded',
    'CBShld': 'Copyback shielded',
    'Cpybck': 'CopyBack',
    'GHS': 'Global Hotspare',
    'DHS': 'Dedicated Hotspare',
    'Rbld': 'Rebuild',
    'Msng': 'Missing',
    'Sntze': 'Sanitize',
    'F': 'Foreign',
    # Controller overview
    'Opt': 'Optimal',
    'NdAtn': 'Needs Attention',
    'Unkwn': 'Unknown',
    'Dsbl': 'Disabled',
}


def translate(code: str) -> str:
    """Translate a storcli status acronym to a readable label

    Unknown codes are returned unchanged.
    """
    return ACRONYMS.get(code, code)
