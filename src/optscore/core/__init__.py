from optscore.core.normalizer import days_to_expiry, normalize_chain, normalize_record

__all__ = ["days_to_expiry", "normalize_chain", "normalize_record"]
