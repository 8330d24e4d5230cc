import math
import numpy as np
import pandas as pd
import pandas_ta as ta

from typing import List, Optional, Sequence

from config import setup_logger, IndicatorParameters
from models import DailyPriceBar, DailyIndicatorRecord


logger = setup_logger(name="IndicatorsService")


def _to_optional(value) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


class IndicatorsService:
    """Derives moving averages, pct change, RSI and volume spike ratio from price bars"""

    def __init__(self):
        self.params = IndicatorParameters()

    @staticmethod
    def calculate_pct_change(df_close: pd.Series) -> pd.Series:
        """
        Fractional change vs previous close: (close - prev) / prev
        First value is 0 (no prior bar)
        """
        prev = df_close.shift(1)
        pct = (df_close - prev) / prev
        if len(pct):
            pct.iloc[0] = 0.0
        return pct

    @staticmethod
    def calculate_sma(series: pd.Series, length: int) -> pd.Series:
        """
        Simple moving average over the trailing `length` values inclusive
        NaN until a full window exists
        """
        if len(series) < length:
            return pd.Series(np.nan, index=series.index, dtype=float)
        sma = ta.sma(series, length=length, talib=False)
        if sma is None:
            return pd.Series(np.nan, index=series.index, dtype=float)
        return sma.astype(float)

    @staticmethod
    def calculate_rsi(df_close: pd.Series, length: int = 14) -> pd.Series:
        """
        Wilder RSI, NaN until `length` prior closes exist
        A window with no losses reads 100, values clipped to [0, 100]
        """
        if len(df_close) <= length:
            return pd.Series(np.nan, index=df_close.index, dtype=float)
        rsi = ta.rsi(df_close, length=length, talib=False)
        if rsi is None:
            return pd.Series(np.nan, index=df_close.index, dtype=float)
        rsi = rsi.astype(float)
        warm = pd.Series(np.arange(len(rsi)) >= length, index=rsi.index)
        # 0/0 when the window is flat: no losses
        rsi = rsi.mask(warm & rsi.isna(), 100.0)
        rsi = rsi.where(warm)
        return rsi.clip(lower=0.0, upper=100.0)

    @staticmethod
    def calculate_volume_spike_ratio(df_volume: pd.Series, volume_ma: pd.Series) -> pd.Series:
        """
        volume / MA20(volume), NaN where the average is missing or zero
        """
        ratio = df_volume / volume_ma.replace(0, np.nan)
        return ratio.replace([np.inf, -np.inf], np.nan)

    @staticmethod
    def build_frame(bars: Sequence[DailyPriceBar]) -> pd.DataFrame:
        """Bars as a DataFrame with numeric columns and a validity mask"""
        df = pd.DataFrame([
            {
                'date': bar.date,
                'open': bar.open,
                'high': bar.high,
                'low': bar.low,
                'close': bar.close,
                'volume': bar.volume,
            }
            for bar in bars
        ])
        for col in ['open', 'high', 'low', 'close', 'volume']:
            df[col] = pd.to_numeric(df[col], errors='coerce').astype(float)
        df['valid'] = np.isfinite(df['close']) & (df['close'] > 0)
        df['volume_valid'] = df['valid'] & np.isfinite(df['volume']) & (df['volume'] >= 0)
        return df

    def calculate_indicator_frame(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Compute indicator columns over valid bars only, then realign to
        every bar. Invalid bars get NaN and do not enter any window.

        Parameters:
            df: Frame produced by build_frame

        Returns:
            DataFrame indexed like df with pct_change, ma*, rsi,
            volume_ma20 and volume_spike_ratio columns
        """
        out = pd.DataFrame(index=df.index)
        valid = df[df['valid']]
        close = valid['close']

        out['pct_change'] = self.calculate_pct_change(close)
        for period in self.params.ma_periods:
            out[f'ma{period}'] = self.calculate_sma(close, period)
        out['rsi'] = self.calculate_rsi(close, self.params.rsi_length)

        volume = df.loc[df['volume_valid'], 'volume']
        volume_ma = self.calculate_sma(volume, self.params.volume_ma_length)
        out[f'volume_ma{self.params.volume_ma_length}'] = volume_ma
        out['volume_spike_ratio'] = self.calculate_volume_spike_ratio(volume, volume_ma)

        # Columns assigned from subsets leave NaN on the excluded rows
        return out.astype(float)

    def compute_indicators(self, bars: Sequence[DailyPriceBar]) -> List[DailyIndicatorRecord]:
        """
        One DailyIndicatorRecord per bar, order preserved.

        Parameters:
            bars: Chronologically ordered price bars

        Returns:
            List[DailyIndicatorRecord]: Empty when bars is empty
        """
        if not bars:
            return []

        df = self.build_frame(bars)
        invalid = int((~df['valid']).sum())
        if invalid:
            logger.warning(f"Skipping {invalid} bar(s) with non-positive or non-finite close")

        ind = self.calculate_indicator_frame(df)
        vol_ma_col = f'volume_ma{self.params.volume_ma_length}'

        records = []
        for i, bar in enumerate(bars):
            row = ind.iloc[i]
            if not df['valid'].iloc[i]:
                records.append(DailyIndicatorRecord(date=bar.date, close=bar.close))
                continue
            records.append(DailyIndicatorRecord(
                date=bar.date,
                close=float(df['close'].iloc[i]),
                pct_change=_to_optional(row['pct_change']),
                ma20=_to_optional(row.get('ma20')),
                ma50=_to_optional(row.get('ma50')),
                ma200=_to_optional(row.get('ma200')),
                rsi=_to_optional(row['rsi']),
                volume_spike_ratio=_to_optional(row['volume_spike_ratio']),
                volume=_to_optional(df['volume'].iloc[i]),
                volume_ma20=_to_optional(row[vol_ma_col]),
                open=_to_optional(df['open'].iloc[i]),
                high=_to_optional(df['high'].iloc[i]),
                low=_to_optional(df['low'].iloc[i]),
            ))
        return records
